"""Product lookup used to validate ids and fill snapshot fields."""
import logging
from typing import Dict, Iterable, Optional, Protocol

from google.api_core.exceptions import GoogleAPICallError

from repairshop.core.errors import UnexpectedError
from repairshop.schemas.product import ProductSnapshot

logger = logging.getLogger("repair.catalog")


class Catalog(Protocol):
    def find_product(self, product_id: str) -> Optional[ProductSnapshot]: ...


class InMemoryCatalog:
    def __init__(self, products: Iterable[ProductSnapshot] = ()):
        self._products: Dict[str, ProductSnapshot] = {p.id: p for p in products}

    def put(self, product: ProductSnapshot) -> None:
        self._products[product.id] = product

    def find_product(self, product_id: str) -> Optional[ProductSnapshot]:
        return self._products.get(product_id)


class FirestoreCatalog:
    """Reads `products/{id}`; soft-deleted products (`is_deleted=True`) count as missing."""

    def __init__(self, db, collection: str = "products"):
        self._db = db
        self._collection = collection

    def find_product(self, product_id: str) -> Optional[ProductSnapshot]:
        try:
            snap = self._db.collection(self._collection).document(product_id).get()
        except GoogleAPICallError as exc:
            raise UnexpectedError("Product catalog unavailable") from exc
        if not snap.exists:
            logger.debug("Product %s not found", product_id)
            return None
        data = snap.to_dict() or {}
        if data.get("is_deleted"):
            return None
        return ProductSnapshot.from_record(product_id, data)
