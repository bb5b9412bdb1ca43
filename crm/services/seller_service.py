import logging
from typing import Optional

from crm.errors import ConcurrentUpdateError
from crm.mapper import seller_to_response
from crm.models import Seller, SellerResponse, utc_now
from crm.repository import SellerRepository
from crm.results import (
    GenericError,
    NotFoundError,
    SellerResult,
    Success,
    ValidationError,
)

logger = logging.getLogger(__name__)


def _invalid_id(seller_id: Optional[int]) -> bool:
    return seller_id is None or seller_id <= 0


class SellerService:

    def __init__(self, sellers: SellerRepository) -> None:
        self._sellers = sellers

    async def create_seller(self, name: str, contact_info: str) -> SellerResult:
        try:
            seller = Seller(
                name=name,
                contact_info=contact_info,
                registration_date=utc_now(),
            )
            saved = await self._sellers.save(seller)
            logger.info("Created seller %s", saved.id)
            return Success(payload=seller_to_response(saved))
        except Exception as exc:
            logger.error("Seller creation failed", exc_info=True)
            return GenericError(message=f"Error creating seller: {exc}")

    async def get_seller_by_id(self, seller_id: Optional[int]) -> SellerResult:
        if _invalid_id(seller_id):
            return ValidationError(message="Seller ID must be positive")

        seller = await self._sellers.find_not_deleted_by_id(seller_id)
        if seller is None:
            return NotFoundError(message=f"Seller not found with id: {seller_id}")
        return Success(payload=seller_to_response(seller))

    async def get_all_sellers(self) -> list[SellerResponse]:
        try:
            return [seller_to_response(s) for s in await self._sellers.find_all_not_deleted()]
        except Exception:
            logger.warning("Listing sellers failed, returning no sellers", exc_info=True)
            return []

    async def update_seller(
        self,
        seller_id: Optional[int],
        name: str,
        contact_info: str,
        version: Optional[int],
    ) -> SellerResult:
        if _invalid_id(seller_id):
            return ValidationError(message="Seller ID must be positive")

        existing = await self._sellers.find_not_deleted_by_id(seller_id)
        if existing is None:
            return NotFoundError(message=f"Seller not found with id: {seller_id}")

        try:
            if existing.version != version:
                logger.info(
                    "Stale update for seller %s: expected version %s, found %s",
                    seller_id, version, existing.version,
                )
                return ValidationError(
                    message=(
                        "Data is stale, please refresh and try again. "
                        f"Expected version: {version}, but found: {existing.version}"
                    )
                )

            existing.name = name
            existing.contact_info = contact_info
            updated = await self._sellers.save(existing)
            return Success(payload=seller_to_response(updated))
        except ConcurrentUpdateError:
            logger.warning("Concurrent update on seller %s", seller_id)
            return GenericError(message="Concurrent update error. Please try again.")
        except Exception as exc:
            logger.error("Updating seller %s failed", seller_id, exc_info=True)
            return GenericError(message=f"Error updating seller: {exc}")

    async def delete_seller_by_id_soft(self, seller_id: Optional[int]) -> SellerResult:
        if _invalid_id(seller_id):
            return ValidationError(message="Seller ID must be positive")

        seller = await self._sellers.find_not_deleted_by_id(seller_id)
        if seller is None:
            return NotFoundError(message=f"Seller not found with id: {seller_id}")

        try:
            seller.deleted = True
            saved = await self._sellers.save(seller)
            logger.info("Soft-deleted seller %s", seller_id)
            return Success(payload=seller_to_response(saved))
        except Exception as exc:
            logger.error("Soft delete of seller %s failed", seller_id, exc_info=True)
            return GenericError(message=f"Error deleting seller: {exc}")

    async def delete_seller_by_id_hard(self, seller_id: Optional[int]) -> SellerResult:
        """
        Remove the seller row for good. Soft-deleted sellers are reachable
        here too. A failure of the lookup itself is raised to the caller.
        """
        if _invalid_id(seller_id):
            return ValidationError(message="Seller ID must be positive")

        seller = await self._sellers.find_by_id(seller_id)
        if seller is None:
            return NotFoundError(message=f"Seller not found with id: {seller_id}")

        try:
            await self._sellers.delete(seller)
        except Exception as exc:
            logger.error("Hard delete of seller %s failed", seller_id, exc_info=True)
            return GenericError(message=f"Error performing hard delete: {exc}")

        logger.info("Hard-deleted seller %s", seller_id)
        return Success(payload=None)
