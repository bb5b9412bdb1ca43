import logging
from datetime import datetime
from decimal import Decimal
from typing import Optional

from crm.errors import ConcurrentUpdateError
from crm.mapper import transaction_to_response
from crm.models import (
    PaymentType,
    Transaction,
    TransactionFlatView,
    TransactionResponse,
    to_naive_utc,
    utc_now,
)
from crm.repository import SellerRepository, TransactionRepository
from crm.results import (
    GenericError,
    NotFoundError,
    SellerNotFoundError,
    Success,
    TransactionResult,
    ValidationError,
)

logger = logging.getLogger(__name__)


def _invalid_id(value: Optional[int]) -> bool:
    return value is None or value <= 0


def _invalid_range(start: Optional[datetime], end: Optional[datetime]) -> bool:
    return start is None or end is None or to_naive_utc(start) > to_naive_utc(end)


class TransactionService:
    """
    CRUD over transactions. Every write checks that the owning seller is
    live; updates are gated on the caller's ``version``.
    """

    def __init__(
        self,
        transactions: TransactionRepository,
        sellers: SellerRepository,
    ) -> None:
        self._transactions = transactions
        self._sellers = sellers

    async def create_transaction(
        self,
        seller_id: int,
        amount: Decimal,
        payment_type: PaymentType,
        transaction_date: Optional[datetime] = None,
    ) -> TransactionResult:
        try:
            seller = await self._sellers.find_not_deleted_by_id(seller_id)
            if seller is None:
                return SellerNotFoundError(message=f"Seller not found with id: {seller_id}")

            txn = Transaction(
                seller=seller,
                amount=amount,
                payment_type=payment_type,
                transaction_date=transaction_date if transaction_date is not None else utc_now(),
            )
            saved = await self._transactions.save(txn)
            logger.info("Created transaction %s for seller %s", saved.id, seller_id)
            return Success(payload=transaction_to_response(saved))
        except Exception as exc:
            logger.error("Transaction creation failed", exc_info=True)
            return GenericError(message=f"Error creating transaction: {exc}")

    async def get_transaction_by_id(self, txn_id: Optional[int]) -> TransactionResult:
        if _invalid_id(txn_id):
            return ValidationError(message="Transaction ID must be positive")

        txn = await self._transactions.find_not_deleted_by_id(txn_id)
        if txn is None:
            return NotFoundError(message=f"Transaction not found with id: {txn_id}")
        return Success(payload=transaction_to_response(txn))

    async def get_all_transactions(self) -> list[TransactionResponse]:
        try:
            return [transaction_to_response(t) for t in await self._transactions.find_all_not_deleted()]
        except Exception:
            logger.warning("Listing transactions failed, returning none", exc_info=True)
            return []

    async def update_transaction_by_id(
        self,
        txn_id: Optional[int],
        seller_id: Optional[int],
        amount: Decimal,
        payment_type: PaymentType,
        transaction_date: Optional[datetime],
        version: Optional[int],
    ) -> TransactionResult:
        if _invalid_id(txn_id):
            return ValidationError(message="Transaction ID must be positive")

        existing = await self._transactions.find_not_deleted_by_id(txn_id)
        if existing is None:
            return NotFoundError(message=f"Transaction not found with id: {txn_id}")

        try:
            if existing.version != version:
                logger.info(
                    "Stale update for transaction %s: expected version %s, found %s",
                    txn_id, version, existing.version,
                )
                return ValidationError(
                    message=(
                        "Data is stale, please refresh and try again. "
                        f"Expected version: {version}, but found: {existing.version}"
                    )
                )

            if seller_id is not None:
                new_seller = await self._sellers.find_not_deleted_by_id(seller_id)
                if new_seller is None:
                    return SellerNotFoundError(message=f"Seller not found with id: {seller_id}")
                existing.seller = new_seller

            existing.amount = amount
            existing.payment_type = payment_type
            if transaction_date is not None:
                existing.transaction_date = to_naive_utc(transaction_date)

            updated = await self._transactions.save(existing)
            return Success(payload=transaction_to_response(updated))
        except ConcurrentUpdateError:
            logger.warning("Concurrent update on transaction %s", txn_id)
            return GenericError(message="Concurrent update error. Please try again.")
        except Exception as exc:
            logger.error("Updating transaction %s failed", txn_id, exc_info=True)
            return GenericError(message=f"Error updating transaction: {exc}")

    async def delete_transaction_by_id_soft(self, txn_id: Optional[int]) -> TransactionResult:
        if _invalid_id(txn_id):
            return ValidationError(message="Transaction ID must be positive")

        txn = await self._transactions.find_not_deleted_by_id(txn_id)
        if txn is None:
            return NotFoundError(message=f"Transaction not found with id: {txn_id}")

        try:
            txn.deleted = True
            saved = await self._transactions.save(txn)
            logger.info("Soft-deleted transaction %s", txn_id)
            return Success(payload=transaction_to_response(saved))
        except Exception as exc:
            logger.error("Soft delete of transaction %s failed", txn_id, exc_info=True)
            return GenericError(message=f"Error deleting transaction: {exc}")

    async def delete_transaction_by_id_hard(self, txn_id: Optional[int]) -> TransactionResult:
        try:
            if _invalid_id(txn_id):
                return ValidationError(message=f"Invalid transaction ID: {txn_id}")

            if not await self._transactions.exists_by_id(txn_id):
                return NotFoundError(message=f"Transaction not found with id: {txn_id}")

            await self._transactions.delete_by_id(txn_id)
            logger.info("Hard-deleted transaction %s", txn_id)
            return Success(payload=None)
        except Exception as exc:
            logger.error("Hard delete of transaction %s failed", txn_id, exc_info=True)
            return GenericError(message=f"Error deleting transaction: {exc}")

    async def get_transactions_by_seller_id(self, seller_id: Optional[int]) -> list[TransactionFlatView]:
        # storage failures are not swallowed here
        if _invalid_id(seller_id):
            return []
        return await self._transactions.find_flat_by_seller_id(seller_id)

    async def get_transactions_by_seller_id_and_date_range(
        self,
        seller_id: Optional[int],
        start: Optional[datetime],
        end: Optional[datetime],
    ) -> list[TransactionResponse]:
        if _invalid_id(seller_id) or _invalid_range(start, end):
            return []
        try:
            txns = await self._transactions.find_by_seller_id_and_date_range(
                seller_id, to_naive_utc(start), to_naive_utc(end),
            )
            return [transaction_to_response(t) for t in txns]
        except Exception:
            logger.warning("Range query for seller %s failed", seller_id, exc_info=True)
            return []

    async def get_transactions_by_date_range(
        self,
        start: Optional[datetime],
        end: Optional[datetime],
    ) -> list[TransactionResponse]:
        if _invalid_range(start, end):
            return []
        try:
            return [transaction_to_response(t) for t in await self._transactions.find_by_date_range(
                to_naive_utc(start), to_naive_utc(end),
            )]
        except Exception:
            logger.warning("Range query %s..%s failed", start, end, exc_info=True)
            return []
