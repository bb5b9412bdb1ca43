import itertools
import logging
from datetime import datetime
from decimal import Decimal
from typing import Optional

from crm.errors import ConcurrentUpdateError, RecordNotFoundError, StorageError
from crm.models import Seller, SellerView, Transaction, TransactionFlatView
from crm.repository import SellerRepository, TransactionRepository

logger = logging.getLogger(__name__)

_ZERO = Decimal("0")


class DataStore:
    """
    In-memory rows for sellers and transactions.

    Rows are copied on the way in and on the way out, so an entity a caller
    mutates is never the stored row until it goes back through ``save_*``.
    A transaction row keeps only its seller's id meaningful; reads re-attach
    the current seller row, like a join.
    """

    def __init__(self) -> None:
        self.sellers: dict[int, Seller] = {}
        self.transactions: dict[int, Transaction] = {}
        self._seller_ids = itertools.count(1)
        self._txn_ids = itertools.count(1)

    # ── writes ────────────────────────────────────────────────────────────────

    def save_seller(self, seller: Seller) -> Seller:
        if seller.id is None:
            row = seller.model_copy(update={"id": next(self._seller_ids), "version": 0})
        else:
            current = self.sellers.get(seller.id)
            if current is None:
                raise RecordNotFoundError("Seller", seller.id)
            if current.version != seller.version:
                raise ConcurrentUpdateError("Seller", seller.id, seller.version, current.version)
            row = seller.model_copy(update={"version": seller.version + 1})
        self.sellers[row.id] = row
        return row.model_copy()

    def save_transaction(self, txn: Transaction) -> Transaction:
        seller_id = txn.seller.id
        if seller_id not in self.sellers:
            raise StorageError(f"Transaction references unknown seller {seller_id}")

        if txn.id is None:
            row = txn.model_copy(update={"id": next(self._txn_ids), "version": 0})
        else:
            current = self.transactions.get(txn.id)
            if current is None:
                raise RecordNotFoundError("Transaction", txn.id)
            if current.version != txn.version:
                raise ConcurrentUpdateError("Transaction", txn.id, txn.version, current.version)
            row = txn.model_copy(update={"version": txn.version + 1})
        self.transactions[row.id] = row
        return self._join(row)

    def delete_seller(self, seller_id: int) -> None:
        if seller_id not in self.sellers:
            raise RecordNotFoundError("Seller", seller_id)
        # foreign key: soft-deleted transactions still hold the reference
        referencing = [t.id for t in self.transactions.values() if t.seller.id == seller_id]
        if referencing:
            raise StorageError(
                f"Seller {seller_id} is still referenced by {len(referencing)} transaction(s)"
            )
        del self.sellers[seller_id]

    def delete_transaction(self, txn_id: int) -> None:
        if txn_id not in self.transactions:
            raise RecordNotFoundError("Transaction", txn_id)
        del self.transactions[txn_id]

    def clear(self) -> None:
        self.sellers.clear()
        self.transactions.clear()
        self._seller_ids = itertools.count(1)
        self._txn_ids = itertools.count(1)

    # ── reads ─────────────────────────────────────────────────────────────────

    def get_seller(self, seller_id: int) -> Optional[Seller]:
        row = self.sellers.get(seller_id)
        return row.model_copy() if row is not None else None

    def get_transaction(self, txn_id: int) -> Optional[Transaction]:
        row = self.transactions.get(txn_id)
        return self._join(row) if row is not None else None

    def list_sellers(self) -> list[Seller]:
        return [self.sellers[sid].model_copy() for sid in sorted(self.sellers)]

    def list_transactions(self) -> list[Transaction]:
        rows = sorted(self.transactions.values(), key=lambda t: (t.transaction_date, t.id))
        return [self._join(t) for t in rows]

    def _join(self, row: Transaction) -> Transaction:
        return row.model_copy(update={"seller": self.sellers[row.seller.id].model_copy()})

    # ── aggregation ───────────────────────────────────────────────────────────

    def top_sellers_by_period(self, start: datetime, end: datetime) -> list[Seller]:
        # inner join: only sellers with at least one live transaction in range
        totals: dict[int, Decimal] = {}
        for t in self.transactions.values():
            if t.deleted or not (start <= t.transaction_date <= end):
                continue
            seller = self.sellers[t.seller.id]
            if seller.deleted:
                continue
            totals[seller.id] = totals.get(seller.id, _ZERO) + t.amount

        ranked = sorted(sorted(totals), key=lambda sid: totals[sid], reverse=True)
        return [self.sellers[sid].model_copy() for sid in ranked]

    def sellers_with_amount_less_than(
        self, amount: Decimal, start: datetime, end: datetime
    ) -> list[Seller]:
        # outer join: a seller with nothing in range totals zero
        result = []
        for seller in self.list_sellers():
            if seller.deleted:
                continue
            total = sum(
                (
                    t.amount
                    for t in self.transactions.values()
                    if t.seller.id == seller.id
                    and not t.deleted
                    and start <= t.transaction_date <= end
                ),
                _ZERO,
            )
            if total < amount:
                result.append(seller)
        return result


class InMemorySellerRepository(SellerRepository):

    def __init__(self, store: DataStore) -> None:
        self._store = store

    async def find_not_deleted_by_id(self, seller_id: int) -> Optional[Seller]:
        seller = self._store.get_seller(seller_id)
        if seller is None or seller.deleted:
            return None
        return seller

    async def find_by_id(self, seller_id: int) -> Optional[Seller]:
        return self._store.get_seller(seller_id)

    async def find_all_not_deleted(self) -> list[Seller]:
        return [s for s in self._store.list_sellers() if not s.deleted]

    async def find_by_name_and_not_deleted(self, name: str) -> Optional[Seller]:
        for s in self._store.list_sellers():
            if s.name == name and not s.deleted:
                return s
        return None

    async def find_top_sellers_by_period(self, start: datetime, end: datetime) -> list[Seller]:
        return self._store.top_sellers_by_period(start, end)

    async def find_sellers_with_amount_less_than(
        self, amount: Decimal, start: datetime, end: datetime
    ) -> list[Seller]:
        return self._store.sellers_with_amount_less_than(amount, start, end)

    async def save(self, seller: Seller) -> Seller:
        saved = self._store.save_seller(seller)
        logger.debug("Saved seller %s (version=%s)", saved.id, saved.version)
        return saved

    async def delete(self, seller: Seller) -> None:
        self._store.delete_seller(seller.id)
        logger.debug("Removed seller row %s", seller.id)


class InMemoryTransactionRepository(TransactionRepository):

    def __init__(self, store: DataStore) -> None:
        self._store = store

    def _live(self) -> list[Transaction]:
        return [t for t in self._store.list_transactions() if not t.deleted]

    async def find_not_deleted_by_id(self, txn_id: int) -> Optional[Transaction]:
        txn = self._store.get_transaction(txn_id)
        if txn is None or txn.deleted:
            return None
        return txn

    async def exists_by_id(self, txn_id: int) -> bool:
        return txn_id in self._store.transactions

    async def find_all_not_deleted(self) -> list[Transaction]:
        return self._live()

    async def find_by_seller_id_and_not_deleted(self, seller_id: int) -> list[Transaction]:
        return [t for t in self._live() if t.seller.id == seller_id]

    async def find_by_seller_id_and_date_range(
        self, seller_id: int, start: datetime, end: datetime
    ) -> list[Transaction]:
        return [
            t for t in self._live()
            if t.seller.id == seller_id and start <= t.transaction_date <= end
        ]

    async def find_by_date_range(self, start: datetime, end: datetime) -> list[Transaction]:
        return [t for t in self._live() if start <= t.transaction_date <= end]

    async def find_flat_by_seller_id(self, seller_id: int) -> list[TransactionFlatView]:
        return [
            TransactionFlatView(
                id=t.id,
                amount=t.amount,
                payment_type=t.payment_type,
                transaction_date=t.transaction_date,
                version=t.version,
                seller=SellerView(
                    id=t.seller.id,
                    name=t.seller.name,
                    contact_info=t.seller.contact_info,
                    registration_date=t.seller.registration_date,
                    version=t.seller.version,
                ),
            )
            for t in self._live()
            if t.seller.id == seller_id
        ]

    async def save(self, txn: Transaction) -> Transaction:
        saved = self._store.save_transaction(txn)
        logger.debug("Saved transaction %s (version=%s)", saved.id, saved.version)
        return saved

    async def delete_by_id(self, txn_id: int) -> None:
        self._store.delete_transaction(txn_id)
        logger.debug("Removed transaction row %s", txn_id)


# module-level singleton used by the app
store = DataStore()
