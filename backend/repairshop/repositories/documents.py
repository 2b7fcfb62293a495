"""
Per-owner document storage with compare-and-swap on `version`.

A document (cart, wishlist) is keyed by `owner_id`. `save(doc, expected_version)`
succeeds only when the stored version still equals `expected_version`; the stored
copy then carries `expected_version + 1`. A stale save raises ConflictError and
leaves the stored document untouched.
"""
import logging
import threading
from typing import Dict, Generic, Optional, Protocol, Type, TypeVar

from firebase_admin import firestore
from google.api_core.exceptions import Aborted, AlreadyExists, GoogleAPICallError
from pydantic import BaseModel

from repairshop.core.errors import ConflictError, UnexpectedError

logger = logging.getLogger("repair.store")

D = TypeVar("D", bound=BaseModel)


class DocumentStore(Protocol[D]):
    def load(self, owner_id: str) -> Optional[D]: ...

    def save(self, document: D, expected_version: int) -> D: ...


class InMemoryDocumentStore(Generic[D]):
    """Thread-safe store holding plain dict copies, so callers never alias stored state."""

    def __init__(self, model: Type[D]):
        self._model = model
        self._docs: Dict[str, dict] = {}
        self._lock = threading.Lock()

    def load(self, owner_id: str) -> Optional[D]:
        with self._lock:
            raw = self._docs.get(owner_id)
            return self._model.model_validate(raw) if raw is not None else None

    def save(self, document: D, expected_version: int) -> D:
        with self._lock:
            current = self._docs.get(document.owner_id)
            current_version = current["version"] if current else 0
            if current_version != expected_version:
                raise ConflictError()
            stored = document.model_copy(update={"version": expected_version + 1}, deep=True)
            self._docs[document.owner_id] = stored.model_dump()
            return stored

    def __len__(self) -> int:
        with self._lock:
            return len(self._docs)


# firestore_v1.transaction message once max_attempts is exhausted
_RETRIES_EXHAUSTED = "Failed to commit transaction"


def _stored_version(snap) -> int:
    if not snap.exists:
        return 0
    raw = (snap.to_dict() or {}).get("version", 0)
    if isinstance(raw, bool) or not isinstance(raw, int):
        raise UnexpectedError(f"Corrupt version {raw!r} on {snap.reference.path}")
    return raw


def _apply_if_version(transaction, ref, expected_version: int, payload: dict) -> None:
    snap = ref.get(transaction=transaction)
    if _stored_version(snap) != expected_version:
        raise ConflictError()
    if snap.exists:
        transaction.set(ref, payload)
    else:
        # create() fails if another writer materialized the document first
        transaction.create(ref, payload)


_write_if_version = firestore.transactional(_apply_if_version)


class FirestoreDocumentStore(Generic[D]):
    """Documents live at `<collection>/<owner_id>`; the owner id is the document id."""

    def __init__(self, db, collection: str, model: Type[D]):
        self._db = db
        self._collection = collection
        self._model = model

    def _ref(self, owner_id: str):
        return self._db.collection(self._collection).document(owner_id)

    def load(self, owner_id: str) -> Optional[D]:
        try:
            snap = self._ref(owner_id).get()
        except GoogleAPICallError as exc:
            raise UnexpectedError(f"Failed to read {self._collection}/{owner_id}") from exc
        if not snap.exists:
            return None
        data = snap.to_dict() or {}
        data["owner_id"] = owner_id
        return self._model.model_validate(data)

    def save(self, document: D, expected_version: int) -> D:
        stored = document.model_copy(update={"version": expected_version + 1}, deep=True)
        payload = stored.model_dump(mode="json", exclude={"owner_id"})
        transaction = self._db.transaction(max_attempts=1)
        try:
            _write_if_version(transaction, self._ref(document.owner_id), expected_version, payload)
        except (Aborted, AlreadyExists) as exc:
            logger.info("Write conflict on %s/%s: %s", self._collection, document.owner_id, exc)
            raise ConflictError() from exc
        except ValueError as exc:
            if not str(exc).startswith(_RETRIES_EXHAUSTED):
                raise
            logger.info("Transaction gave up on %s/%s: %s", self._collection, document.owner_id, exc)
            raise ConflictError() from exc
        except GoogleAPICallError as exc:
            raise UnexpectedError(f"Failed to write {self._collection}/{document.owner_id}") from exc
        return stored
