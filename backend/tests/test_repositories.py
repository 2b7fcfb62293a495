"""
Tests for the storage collaborators: in-memory CAS store, owner locks and the
Firestore catalog adapter (Firestore client mocked).
"""
from decimal import Decimal
from unittest.mock import MagicMock

import pytest
from google.api_core.exceptions import Aborted, AlreadyExists, ServiceUnavailable

from repairshop.core.errors import ConflictError, UnexpectedError
from repairshop.repositories import documents
from repairshop.repositories.catalog import FirestoreCatalog
from repairshop.repositories.documents import FirestoreDocumentStore, InMemoryDocumentStore
from repairshop.schemas.cart import CartDocument, LineItem
from repairshop.services.locks import OwnerLocks


def _line(pid: str = "7", qty: int = 1) -> LineItem:
    return LineItem(product_id=pid, quantity=qty, unit_price_snapshot=Decimal("10.00"))


class TestInMemoryDocumentStore:

    def test_first_save_requires_version_zero(self):
        store = InMemoryDocumentStore(CartDocument)
        saved = store.save(CartDocument(owner_id="u1", items=[_line()]), expected_version=0)

        assert saved.version == 1
        with pytest.raises(ConflictError):
            store.save(CartDocument(owner_id="u1"), expected_version=0)

    def test_loaded_document_is_a_copy(self):
        store = InMemoryDocumentStore(CartDocument)
        store.save(CartDocument(owner_id="u1", items=[_line()]), expected_version=0)

        loaded = store.load("u1")
        loaded.items[0].quantity = 99

        assert store.load("u1").items[0].quantity == 1

    def test_saved_document_is_not_aliased(self):
        store = InMemoryDocumentStore(CartDocument)
        doc = CartDocument(owner_id="u1", items=[_line()])
        store.save(doc, expected_version=0)

        doc.items.append(_line("12"))

        assert len(store.load("u1").items) == 1

    def test_duplicate_line_keys_are_rejected(self):
        with pytest.raises(ValueError):
            CartDocument(owner_id="u1", items=[_line("7"), _line("7", 2)])


class TestOwnerLocks:

    def test_lock_entry_removed_after_release(self):
        locks = OwnerLocks()
        with locks.hold("u1"):
            assert len(locks) == 1
        assert len(locks) == 0


class TestFirestoreCatalog:

    def _catalog(self, exists: bool, data: dict) -> FirestoreCatalog:
        snap = MagicMock()
        snap.exists = exists
        snap.to_dict.return_value = data
        db = MagicMock()
        db.collection.return_value.document.return_value.get.return_value = snap
        return FirestoreCatalog(db)

    def test_prefers_final_price_and_first_image(self):
        catalog = self._catalog(True, {
            "title": "Ekran Koruyucu",
            "price": 100,
            "final_price": 80.5,
            "images": ["a.jpg", "b.jpg"],
        })

        product = catalog.find_product("p1")

        assert product.id == "p1"
        assert product.name == "Ekran Koruyucu"
        assert product.price == Decimal("80.5")
        assert product.image == "a.jpg"

    def test_soft_deleted_product_is_missing(self):
        catalog = self._catalog(True, {"title": "Eski", "price": 5, "is_deleted": True})

        assert catalog.find_product("p1") is None

    def test_missing_document(self):
        assert self._catalog(False, {}).find_product("p1") is None


def _snapshot(exists: bool, data: dict = None) -> MagicMock:
    snap = MagicMock()
    snap.exists = exists
    snap.to_dict.return_value = data or {}
    return snap


class TestFirestoreVersionCheck:
    """The body run inside the Firestore transaction."""

    def test_first_write_uses_create(self):
        transaction, ref = MagicMock(), MagicMock()
        ref.get.return_value = _snapshot(False)

        documents._apply_if_version(transaction, ref, 0, {"items": [], "version": 1})

        transaction.create.assert_called_once_with(ref, {"items": [], "version": 1})
        transaction.set.assert_not_called()

    def test_matching_version_overwrites(self):
        transaction, ref = MagicMock(), MagicMock()
        ref.get.return_value = _snapshot(True, {"items": [], "version": 3})

        documents._apply_if_version(transaction, ref, 3, {"items": [], "version": 4})

        transaction.set.assert_called_once_with(ref, {"items": [], "version": 4})
        ref.get.assert_called_once_with(transaction=transaction)

    def test_stale_version_is_a_conflict(self):
        transaction, ref = MagicMock(), MagicMock()
        ref.get.return_value = _snapshot(True, {"version": 5})

        with pytest.raises(ConflictError):
            documents._apply_if_version(transaction, ref, 4, {"version": 5})
        transaction.set.assert_not_called()

    def test_existing_document_with_expected_zero_is_a_conflict(self):
        transaction, ref = MagicMock(), MagicMock()
        ref.get.return_value = _snapshot(True, {"version": 1})

        with pytest.raises(ConflictError):
            documents._apply_if_version(transaction, ref, 0, {"version": 1})
        transaction.create.assert_not_called()

    @pytest.mark.parametrize("raw", ["3", None, 2.0, True])
    def test_corrupt_version_is_unexpected_not_conflict(self, raw):
        transaction, ref = MagicMock(), MagicMock()
        ref.get.return_value = _snapshot(True, {"version": raw})

        with pytest.raises(UnexpectedError):
            documents._apply_if_version(transaction, ref, 3, {"version": 4})


class TestFirestoreDocumentStore:

    def _store(self, snap: MagicMock = None):
        db = MagicMock()
        if snap is not None:
            db.collection.return_value.document.return_value.get.return_value = snap
        return db, FirestoreDocumentStore(db, "carts", CartDocument)

    def test_load_missing_document(self):
        _, store = self._store(_snapshot(False))

        assert store.load("u1") is None

    def test_load_sets_owner_from_document_id(self):
        _, store = self._store(_snapshot(True, {
            "items": [{"product_id": "7", "quantity": 2, "unit_price_snapshot": "10.00"}],
            "version": 2,
        }))

        cart = store.load("u1")

        assert cart.owner_id == "u1"
        assert cart.version == 2
        assert cart.items[0].unit_price_snapshot == Decimal("10.00")

    def test_load_api_failure_is_unexpected(self):
        db, store = self._store()
        db.collection.return_value.document.return_value.get.side_effect = ServiceUnavailable("down")

        with pytest.raises(UnexpectedError):
            store.load("u1")

    def test_save_writes_json_payload_with_next_version(self, monkeypatch):
        write = MagicMock()
        monkeypatch.setattr(documents, "_write_if_version", write)
        db, store = self._store()

        stored = store.save(CartDocument(owner_id="u1", items=[_line()]), expected_version=2)

        assert stored.version == 3
        db.transaction.assert_called_once_with(max_attempts=1)
        _, _, expected_version, payload = write.call_args.args
        assert expected_version == 2
        assert payload["version"] == 3
        assert "owner_id" not in payload
        assert payload["items"][0]["unit_price_snapshot"] == "10.00"

    @pytest.mark.parametrize("error", [
        Aborted("contention"),
        AlreadyExists("created concurrently"),
        ValueError("Failed to commit transaction in 1 attempts."),
        ConflictError(),
    ])
    def test_save_conflicts(self, monkeypatch, error):
        monkeypatch.setattr(documents, "_write_if_version", MagicMock(side_effect=error))
        _, store = self._store()

        with pytest.raises(ConflictError):
            store.save(CartDocument(owner_id="u1"), expected_version=0)

    def test_save_api_failure_is_unexpected(self, monkeypatch):
        monkeypatch.setattr(documents, "_write_if_version", MagicMock(side_effect=ServiceUnavailable("down")))
        _, store = self._store()

        with pytest.raises(UnexpectedError):
            store.save(CartDocument(owner_id="u1"), expected_version=0)

    def test_unrelated_value_error_is_not_a_conflict(self, monkeypatch):
        monkeypatch.setattr(documents, "_write_if_version", MagicMock(side_effect=ValueError("bad payload")))
        _, store = self._store()

        with pytest.raises(ValueError, match="bad payload"):
            store.save(CartDocument(owner_id="u1"), expected_version=0)
