import logging
from datetime import datetime
from decimal import Decimal
from typing import Optional

from crm.errors import AnalyticsError
from crm.mapper import seller_to_response
from crm.models import BestPeriodResult, SellerResponse, to_naive_utc
from crm.repository import SellerRepository, TransactionRepository

logger = logging.getLogger(__name__)


def _invalid_range(start: Optional[datetime], end: Optional[datetime]) -> bool:
    return start is None or end is None or to_naive_utc(start) > to_naive_utc(end)


class AnalyticsService:
    """
    Read-only rankings over sellers and their transactions.

    Bad input never produces an error here: the operations answer with an
    empty list, or a zeroed ``BestPeriodResult``.
    """

    def __init__(
        self,
        sellers: SellerRepository,
        transactions: TransactionRepository,
    ) -> None:
        self._sellers = sellers
        self._transactions = transactions

    async def find_top_seller_by_period(
        self,
        start: Optional[datetime],
        end: Optional[datetime],
    ) -> list[SellerResponse]:
        if _invalid_range(start, end):
            return []
        try:
            ranked = await self._sellers.find_top_sellers_by_period(to_naive_utc(start), to_naive_utc(end))
            return [seller_to_response(s) for s in ranked[:1]]
        except Exception:
            logger.warning("Top seller query failed", exc_info=True)
            return []

    async def find_sellers_with_total_amount_less_than(
        self,
        amount: Optional[Decimal],
        start: Optional[datetime],
        end: Optional[datetime],
    ) -> list[SellerResponse]:
        if amount is None or amount < 0 or _invalid_range(start, end):
            return []
        try:
            sellers = await self._sellers.find_sellers_with_amount_less_than(
                amount, to_naive_utc(start), to_naive_utc(end),
            )
            return [seller_to_response(s) for s in sellers]
        except Exception:
            logger.warning("Low performer query failed", exc_info=True)
            return []

    async def find_best_transaction_period_for_seller(self, seller_id: Optional[int]) -> BestPeriodResult:
        """
        Longest run of consecutive transactions for the seller, by date.

        Every window is eligible, so the winner is always the whole history:
        first date, last date, total count.
        """
        if seller_id is None or seller_id <= 0:
            return BestPeriodResult()

        try:
            txns = sorted(
                await self._transactions.find_by_seller_id_and_not_deleted(seller_id),
                key=lambda t: t.transaction_date,
            )
        except Exception as exc:
            raise AnalyticsError("Error finding best transaction period") from exc

        if not txns:
            return BestPeriodResult()

        max_count = 0
        best_start = best_end = None
        for i in range(len(txns)):
            for j in range(i, len(txns)):
                count = j - i + 1
                if count > max_count:
                    max_count = count
                    best_start = txns[i].transaction_date
                    best_end = txns[j].transaction_date

        return BestPeriodResult(
            start_date=best_start,
            end_date=best_end,
            transaction_count=max_count,
        )
