"""
# `repairshop/main.py` — Ana Uygulama

FastAPI uygulamasının başlangıç noktası: logging, CORS, hata handler'ları ve router'lar burada bağlanır.

**Public Router'lar:** `/cart`, `/wishlist`
**Admin Router'lar (prefix `/admin`):** `/carts`

Admin router'lar `require_admin` ile korunur; kullanıcı router'ları `require_shopper` ile (misafirler 403 alır).
"""
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from repairshop.config import settings
from repairshop.core.errors import install_error_handlers
from repairshop.routers import carts, wishlist


def configure_logging() -> None:
    level = logging.DEBUG if settings.debug else getattr(logging, settings.log_level.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def create_app() -> FastAPI:
    configure_logging()

    app = FastAPI(
        title="Repair Services Shop API",
        description="Cart, wishlist and role-gated endpoints for a repair services and device parts shop.",
        version="1.0.0",
        redirect_slashes=False,
    )

    # Configure CORS (allow front-end domain or all origins as specified)
    allow_origins = [o.strip() for o in settings.allowed_origins.split(',')] if settings.allowed_origins else ["*"]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    install_error_handlers(app)

    # Include public routers
    app.include_router(carts.router)
    app.include_router(wishlist.router)

    # Include admin routers (with prefix /admin)
    app.include_router(carts.admin_router, prefix="/admin")

    @app.get("/", tags=["Health"])
    def root():
        return {"success": True, "message": "Welcome to Repair Services API"}

    return app


app = create_app()

# Run the app directly with uvicorn (for development)
if __name__ == "__main__":
    import uvicorn
    uvicorn.run("repairshop.main:app", host="0.0.0.0", port=8000, reload=settings.debug)
