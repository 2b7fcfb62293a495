"""
repairshop/config.py - Application configuration and Firebase initialization.

This module defines a Pydantic BaseSettings class to load configuration from environment,
and lazily initializes the Firebase Admin SDK (Firestore DB) using the provided credentials.
Other modules import `settings` and call `get_db()` when they actually need Firestore.
"""
import logging
from functools import lru_cache
from typing import Optional

import firebase_admin
from firebase_admin import credentials, firestore
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger("repair.config")


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""
    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    firebase_cred_file: str = Field('firebase_service_account.json', alias='FIREBASE_CRED_FILE')
    firebase_project_id: Optional[str] = Field(None, alias='FIREBASE_PROJECT_ID')

    # Firebase credentials from environment variables (for Cloud Run)
    firebase_private_key_id: Optional[str] = Field(None, alias='FIREBASE_PRIVATE_KEY_ID')
    firebase_private_key: Optional[str] = Field(None, alias='FIREBASE_PRIVATE_KEY')
    firebase_client_email: Optional[str] = Field(None, alias='FIREBASE_CLIENT_EMAIL')
    firebase_client_id: Optional[str] = Field(None, alias='FIREBASE_CLIENT_ID')
    firebase_auth_uri: Optional[str] = Field(None, alias='FIREBASE_AUTH_URI')
    firebase_token_uri: Optional[str] = Field(None, alias='FIREBASE_TOKEN_URI')
    firebase_auth_provider_x509_cert_url: Optional[str] = Field(None, alias='FIREBASE_AUTH_PROVIDER_X509_CERT_URL')
    firebase_client_x509_cert_url: Optional[str] = Field(None, alias='FIREBASE_CLIENT_X509_CERT_URL')

    firestore_collection_prefix: str = Field('', alias='FIREBASE_COLLECTION_PREFIX')
    storage_backend: str = Field('firestore', alias='STORAGE_BACKEND')  # firestore | memory

    # Accept "mock_jwt_token_<uid>" bearer tokens (local development only)
    allow_mock_tokens: bool = Field(False, alias='ALLOW_MOCK_TOKENS')

    debug: bool = Field(False, alias='DEBUG')
    log_level: str = Field('INFO', alias='LOG_LEVEL')
    allowed_origins: str = Field('*', alias='ALLOWED_ORIGINS')  # Comma-separated list or '*' for all

    def collection(self, name: str) -> str:
        """Prefix-aware collection name (e.g. 'test_carts')."""
        prefix = self.firestore_collection_prefix.strip()
        return f"{prefix}{name}" if prefix else name


# Load settings from environment (.env file, etc.)
settings = Settings()


def _credentials():
    # Use environment variables for Firebase credentials (Cloud Run)
    if all([
        settings.firebase_private_key_id,
        settings.firebase_private_key,
        settings.firebase_client_email,
        settings.firebase_client_id,
        settings.firebase_auth_uri,
        settings.firebase_token_uri,
        settings.firebase_auth_provider_x509_cert_url,
        settings.firebase_client_x509_cert_url,
    ]):
        return credentials.Certificate({
            "type": "service_account",
            "project_id": settings.firebase_project_id,
            "private_key_id": settings.firebase_private_key_id,
            "private_key": settings.firebase_private_key,
            "client_email": settings.firebase_client_email,
            "client_id": settings.firebase_client_id,
            "auth_uri": settings.firebase_auth_uri,
            "token_uri": settings.firebase_token_uri,
            "auth_provider_x509_cert_url": settings.firebase_auth_provider_x509_cert_url,
            "client_x509_cert_url": settings.firebase_client_x509_cert_url,
        })
    # Use service account file (local development)
    return credentials.Certificate(settings.firebase_cred_file)


@lru_cache(maxsize=1)
def get_firebase_app() -> firebase_admin.App:
    """Initialize the Firebase Admin SDK once; reuse the default app if it already exists."""
    try:
        return firebase_admin.get_app()
    except ValueError:
        pass
    options = {'projectId': settings.firebase_project_id} if settings.firebase_project_id else None
    logger.info("Initializing Firebase app (project=%s)", settings.firebase_project_id)
    return firebase_admin.initialize_app(_credentials(), options)


@lru_cache(maxsize=1)
def get_db():
    """Firestore database client bound to the default Firebase app."""
    return firestore.client(app=get_firebase_app())
