"""
Unit tests for the seller service.
"""

from datetime import datetime
from decimal import Decimal
from unittest.mock import AsyncMock

import pytest

from crm.errors import ConcurrentUpdateError
from crm.models import PaymentType, Seller, Transaction, utc_now
from crm.repository import SellerRepository
from crm.results import (
    ErrorType,
    GenericError,
    NotFoundError,
    Success,
    ValidationError,
)
from crm.services.seller_service import SellerService
from crm.store import DataStore, InMemorySellerRepository


# ── fixtures ──────────────────────────────────────────────────────────────────

def make_service() -> tuple[SellerService, DataStore]:
    store = DataStore()
    return SellerService(InMemorySellerRepository(store)), store


def stored_seller(version: int = 0, deleted: bool = False) -> Seller:
    return Seller(
        id=1,
        name="Alice",
        contact_info="a@x.com",
        registration_date=datetime(2026, 1, 1),
        deleted=deleted,
        version=version,
    )


def mock_repo() -> AsyncMock:
    return AsyncMock(spec=SellerRepository)


BAD_IDS = [0, -1, None]


# ── tests ─────────────────────────────────────────────────────────────────────

class TestCreate:
    async def test_create_returns_mapped_seller(self):
        service, store = make_service()
        before = utc_now()
        result = await service.create_seller("Alice", "a@x.com")

        assert isinstance(result, Success)
        assert result.is_success
        assert result.payload.name == "Alice"
        assert result.payload.contact_info == "a@x.com"
        assert result.payload.version == 0
        assert result.payload.registration_date >= before
        assert store.get_seller(result.payload.id) is not None

    async def test_storage_failure_is_generic_error(self):
        repo = mock_repo()
        repo.save.side_effect = RuntimeError("disk full")
        result = await SellerService(repo).create_seller("Alice", "a@x.com")

        assert isinstance(result, GenericError)
        assert result.message == "Error creating seller: disk full"
        assert result.error_type is ErrorType.GENERIC_ERROR


class TestGet:
    @pytest.mark.parametrize("bad_id", BAD_IDS)
    async def test_non_positive_id(self, bad_id):
        service, _ = make_service()
        result = await service.get_seller_by_id(bad_id)
        assert isinstance(result, ValidationError)
        assert result.message == "Seller ID must be positive"

    async def test_missing_seller(self):
        service, _ = make_service()
        result = await service.get_seller_by_id(404)
        assert isinstance(result, NotFoundError)
        assert result.message == "Seller not found with id: 404"

    async def test_soft_deleted_seller_is_not_found(self):
        service, _ = make_service()
        created = (await service.create_seller("Alice", "a@x.com")).payload
        await service.delete_seller_by_id_soft(created.id)
        assert isinstance(await service.get_seller_by_id(created.id), NotFoundError)

    async def test_get_all_skips_deleted(self):
        service, _ = make_service()
        keep = (await service.create_seller("Alice", "a@x.com")).payload
        drop = (await service.create_seller("Bob", "b@x.com")).payload
        await service.delete_seller_by_id_soft(drop.id)

        assert [s.id for s in await service.get_all_sellers()] == [keep.id]

    async def test_get_all_swallows_failures(self):
        repo = mock_repo()
        repo.find_all_not_deleted.side_effect = RuntimeError("connection reset")
        assert await SellerService(repo).get_all_sellers() == []


class TestUpdate:
    async def test_version_walkthrough(self):
        service, _ = make_service()
        created = await service.create_seller("Alice", "a@x.com")
        assert created.payload.version == 0
        seller_id = created.payload.id

        updated = await service.update_seller(seller_id, "Alice", "alice@x.com", 0)
        assert isinstance(updated, Success)
        assert updated.payload.version == 1
        assert updated.payload.contact_info == "alice@x.com"
        assert updated.payload.registration_date == created.payload.registration_date

        stale = await service.update_seller(seller_id, "Alice", "alice@x.com", 0)
        assert isinstance(stale, ValidationError)
        assert "Expected version: 0, but found: 1" in stale.message

    @pytest.mark.parametrize("submitted", [None, 0, 2])
    async def test_stale_version_never_writes(self, submitted):
        repo = mock_repo()
        repo.find_not_deleted_by_id.return_value = stored_seller(version=1)
        result = await SellerService(repo).update_seller(1, "New", "new@x.com", submitted)

        assert isinstance(result, ValidationError)
        assert result.message == (
            "Data is stale, please refresh and try again. "
            f"Expected version: {submitted}, but found: 1"
        )
        repo.save.assert_not_awaited()

    async def test_write_time_conflict_is_generic_error(self):
        repo = mock_repo()
        repo.find_not_deleted_by_id.return_value = stored_seller(version=0)
        repo.save.side_effect = ConcurrentUpdateError("Seller", 1, 0, 1)
        result = await SellerService(repo).update_seller(1, "New", "new@x.com", 0)

        assert isinstance(result, GenericError)
        assert result.message == "Concurrent update error. Please try again."

    async def test_other_write_failure(self):
        repo = mock_repo()
        repo.find_not_deleted_by_id.return_value = stored_seller(version=0)
        repo.save.side_effect = RuntimeError("timeout")
        result = await SellerService(repo).update_seller(1, "New", "new@x.com", 0)

        assert isinstance(result, GenericError)
        assert result.message == "Error updating seller: timeout"

    async def test_missing_seller(self):
        service, _ = make_service()
        assert isinstance(await service.update_seller(7, "a", "b", 0), NotFoundError)

    @pytest.mark.parametrize("bad_id", BAD_IDS)
    async def test_non_positive_id(self, bad_id):
        service, _ = make_service()
        assert isinstance(await service.update_seller(bad_id, "a", "b", 0), ValidationError)


class TestSoftDelete:
    async def test_flags_row_and_keeps_it(self):
        service, store = make_service()
        created = (await service.create_seller("Alice", "a@x.com")).payload
        result = await service.delete_seller_by_id_soft(created.id)

        assert isinstance(result, Success)
        assert result.payload.id == created.id
        assert result.payload.version == 1
        row = store.get_seller(created.id)
        assert row.deleted
        assert row.version == 1

    async def test_twice_is_not_found(self):
        service, _ = make_service()
        created = (await service.create_seller("Alice", "a@x.com")).payload
        await service.delete_seller_by_id_soft(created.id)
        assert isinstance(await service.delete_seller_by_id_soft(created.id), NotFoundError)

    async def test_write_failure(self):
        repo = mock_repo()
        repo.find_not_deleted_by_id.return_value = stored_seller()
        repo.save.side_effect = RuntimeError("boom")
        result = await SellerService(repo).delete_seller_by_id_soft(1)

        assert isinstance(result, GenericError)
        assert result.message == "Error deleting seller: boom"

    @pytest.mark.parametrize("bad_id", BAD_IDS)
    async def test_non_positive_id(self, bad_id):
        service, _ = make_service()
        assert isinstance(await service.delete_seller_by_id_soft(bad_id), ValidationError)


class TestHardDelete:
    async def test_reaches_soft_deleted_rows(self):
        service, store = make_service()
        created = (await service.create_seller("Alice", "a@x.com")).payload
        await service.delete_seller_by_id_soft(created.id)

        result = await service.delete_seller_by_id_hard(created.id)
        assert isinstance(result, Success)
        assert result.payload is None
        assert store.get_seller(created.id) is None
        assert isinstance(await service.delete_seller_by_id_hard(created.id), NotFoundError)
        assert isinstance(await service.get_seller_by_id(created.id), NotFoundError)

    async def test_referenced_seller_is_generic_error(self):
        service, store = make_service()
        created = (await service.create_seller("Alice", "a@x.com")).payload
        store.save_transaction(Transaction(
            seller=store.get_seller(created.id),
            amount=Decimal("5"),
            payment_type=PaymentType.CASH,
            transaction_date=datetime(2026, 1, 1),
        ))

        result = await service.delete_seller_by_id_hard(created.id)
        assert isinstance(result, GenericError)
        assert result.message.startswith("Error performing hard delete:")

    async def test_lookup_failure_propagates(self):
        repo = mock_repo()
        repo.find_by_id.side_effect = RuntimeError("lost connection")
        with pytest.raises(RuntimeError, match="lost connection"):
            await SellerService(repo).delete_seller_by_id_hard(1)

    @pytest.mark.parametrize("bad_id", BAD_IDS)
    async def test_non_positive_id(self, bad_id):
        service, _ = make_service()
        assert isinstance(await service.delete_seller_by_id_hard(bad_id), ValidationError)
