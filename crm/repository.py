"""
Repository interfaces the services depend on.

Every method is a coroutine. ``save`` is insert-or-update: an entity without
an id is inserted, one with an id is written only if its ``version`` still
matches the stored row, otherwise ``ConcurrentUpdateError`` is raised.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from decimal import Decimal
from typing import Optional

from crm.models import Seller, Transaction, TransactionFlatView


class SellerRepository(ABC):

    @abstractmethod
    async def find_not_deleted_by_id(self, seller_id: int) -> Optional[Seller]:
        """Seller by id, ``None`` if missing or soft-deleted."""

    @abstractmethod
    async def find_by_id(self, seller_id: int) -> Optional[Seller]:
        """Seller by id regardless of the deleted flag."""

    @abstractmethod
    async def find_all_not_deleted(self) -> list[Seller]:
        ...

    @abstractmethod
    async def find_by_name_and_not_deleted(self, name: str) -> Optional[Seller]:
        """First live seller with exactly this name. Part of the storage contract; no service calls it yet."""

    @abstractmethod
    async def find_top_sellers_by_period(self, start: datetime, end: datetime) -> list[Seller]:
        """
        Sellers ranked by the sum of their transaction amounts in [start, end],
        highest first. Sellers without transactions in the period are left out.
        """

    @abstractmethod
    async def find_sellers_with_amount_less_than(
        self, amount: Decimal, start: datetime, end: datetime
    ) -> list[Seller]:
        """
        Sellers whose transaction total in [start, end] is strictly below
        ``amount``. A seller without transactions in the period totals 0.
        """

    @abstractmethod
    async def save(self, seller: Seller) -> Seller:
        ...

    @abstractmethod
    async def delete(self, seller: Seller) -> None:
        ...


class TransactionRepository(ABC):

    @abstractmethod
    async def find_not_deleted_by_id(self, txn_id: int) -> Optional[Transaction]:
        ...

    @abstractmethod
    async def exists_by_id(self, txn_id: int) -> bool:
        """True if the row exists, soft-deleted or not."""

    @abstractmethod
    async def find_all_not_deleted(self) -> list[Transaction]:
        ...

    @abstractmethod
    async def find_by_seller_id_and_not_deleted(self, seller_id: int) -> list[Transaction]:
        ...

    @abstractmethod
    async def find_by_seller_id_and_date_range(
        self, seller_id: int, start: datetime, end: datetime
    ) -> list[Transaction]:
        ...

    @abstractmethod
    async def find_by_date_range(self, start: datetime, end: datetime) -> list[Transaction]:
        ...

    @abstractmethod
    async def find_flat_by_seller_id(self, seller_id: int) -> list[TransactionFlatView]:
        ...

    @abstractmethod
    async def save(self, txn: Transaction) -> Transaction:
        ...

    @abstractmethod
    async def delete_by_id(self, txn_id: int) -> None:
        ...
