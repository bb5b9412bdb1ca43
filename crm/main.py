import logging
from contextlib import asynccontextmanager
from datetime import datetime
from decimal import Decimal
from typing import Optional, Union

from fastapi import Depends, FastAPI, Query, Response, status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from crm.config import get_settings
from crm.logging_config import setup_logging
from crm.models import (
    BestPeriodResult,
    SellerCreateRequest,
    SellerUpdateRequest,
    TransactionCreateRequest,
    TransactionUpdateRequest,
)
from crm.results import ErrorType, SellerResult, TransactionResult
from crm.seed import seed
from crm.services import AnalyticsService, SellerService, TransactionService
from crm.store import InMemorySellerRepository, InMemoryTransactionRepository, store

logger = logging.getLogger(__name__)

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging(settings)
    # Auto-seed on startup so the service is immediately usable
    if settings.seed_on_startup and not store.sellers:
        seed(store)
    yield


app = FastAPI(
    title=settings.app_title,
    version=settings.app_version,
    description="Sellers, their transactions, and sales analytics",
    lifespan=lifespan,
)


# ── Wiring ───────────────────────────────────────────────────────────────────

def get_seller_service() -> SellerService:
    return SellerService(InMemorySellerRepository(store))


def get_transaction_service() -> TransactionService:
    return TransactionService(
        InMemoryTransactionRepository(store),
        InMemorySellerRepository(store),
    )


def get_analytics_service() -> AnalyticsService:
    return AnalyticsService(
        InMemorySellerRepository(store),
        InMemoryTransactionRepository(store),
    )


_ERROR_STATUS = {
    ErrorType.VALIDATION_ERROR: status.HTTP_400_BAD_REQUEST,
    ErrorType.SELLER_NOT_FOUND: status.HTTP_400_BAD_REQUEST,
    ErrorType.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorType.GENERIC_ERROR: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def _to_response(
    result: Union[SellerResult, TransactionResult],
    success_status: int = status.HTTP_200_OK,
) -> JSONResponse:
    if result.is_success:
        return JSONResponse(status_code=success_status, content=jsonable_encoder(result.payload))
    return JSONResponse(
        status_code=_ERROR_STATUS[result.error_type],
        content={"message": result.message, "error_type": result.error_type.value},
    )


def _unexpected(exc: Exception) -> JSONResponse:
    logger.error("Unhandled service failure: %s", exc, exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"message": f"Error: {exc}", "error_type": ErrorType.GENERIC_ERROR.value},
    )


def _delete_status(result: Union[SellerResult, TransactionResult]) -> Response:
    if result.is_success:
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    return Response(status_code=_ERROR_STATUS[result.error_type])


def _parse_delete_type(delete_type: Optional[str]) -> Optional[str]:
    if delete_type is None or delete_type.lower() not in ("soft", "hard"):
        return None
    return delete_type.lower()


# ── Sellers ──────────────────────────────────────────────────────────────────

@app.get("/api/sellers", summary="List all sellers")
async def list_sellers(service: SellerService = Depends(get_seller_service)):
    try:
        return await service.get_all_sellers()
    except Exception:
        logger.error("Listing sellers failed", exc_info=True)
        return Response(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)


@app.get("/api/sellers/{seller_id}", summary="Get seller details")
async def get_seller(seller_id: int, service: SellerService = Depends(get_seller_service)):
    try:
        return _to_response(await service.get_seller_by_id(seller_id))
    except Exception as exc:
        return _unexpected(exc)


@app.post("/api/sellers", summary="Register a seller")
async def create_seller(body: SellerCreateRequest, service: SellerService = Depends(get_seller_service)):
    try:
        result = await service.create_seller(body.name, body.contact_info)
        return _to_response(result, success_status=status.HTTP_201_CREATED)
    except Exception as exc:
        return _unexpected(exc)


@app.put("/api/sellers/{seller_id}", summary="Update a seller")
async def update_seller(
    seller_id: int,
    body: SellerUpdateRequest,
    service: SellerService = Depends(get_seller_service),
):
    try:
        result = await service.update_seller(seller_id, body.name, body.contact_info, body.version)
        return _to_response(result)
    except Exception as exc:
        return _unexpected(exc)


@app.delete("/api/sellers/{seller_id}", summary="Delete a seller (deleteType=soft|hard)")
async def delete_seller(
    seller_id: int,
    delete_type: Optional[str] = Query(default=None, alias="deleteType"),
    service: SellerService = Depends(get_seller_service),
):
    mode = _parse_delete_type(delete_type)
    if mode is None:
        return Response(status_code=status.HTTP_400_BAD_REQUEST)
    try:
        if mode == "soft":
            result = await service.delete_seller_by_id_soft(seller_id)
        else:
            result = await service.delete_seller_by_id_hard(seller_id)
    except Exception:
        logger.error("Deleting seller %s failed", seller_id, exc_info=True)
        return Response(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)
    return _delete_status(result)


# ── Transactions ─────────────────────────────────────────────────────────────

@app.get("/api/transactions", summary="List all transactions")
async def list_transactions(service: TransactionService = Depends(get_transaction_service)):
    return await service.get_all_transactions()


@app.get("/api/transactions/range", summary="Transactions inside a date range")
async def transactions_in_range(
    start: datetime = Query(..., examples=["2026-01-01T00:00:00"]),
    end: datetime = Query(..., examples=["2026-01-07T23:59:59"]),
    service: TransactionService = Depends(get_transaction_service),
):
    return await service.get_transactions_by_date_range(start, end)


@app.get("/api/transactions/seller/{seller_id}", summary="All transactions of a seller")
async def transactions_for_seller(
    seller_id: int,
    service: TransactionService = Depends(get_transaction_service),
):
    try:
        return await service.get_transactions_by_seller_id(seller_id)
    except Exception:
        logger.error("Listing transactions for seller %s failed", seller_id, exc_info=True)
        return Response(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)


@app.get("/api/transactions/seller/{seller_id}/range", summary="Transactions of a seller inside a date range")
async def transactions_for_seller_in_range(
    seller_id: int,
    start: datetime = Query(...),
    end: datetime = Query(...),
    service: TransactionService = Depends(get_transaction_service),
):
    return await service.get_transactions_by_seller_id_and_date_range(seller_id, start, end)


@app.get("/api/transactions/{txn_id}", summary="Get transaction details")
async def get_transaction(txn_id: int, service: TransactionService = Depends(get_transaction_service)):
    try:
        return _to_response(await service.get_transaction_by_id(txn_id))
    except Exception as exc:
        return _unexpected(exc)


@app.post("/api/transactions", summary="Record a transaction")
async def create_transaction(
    body: TransactionCreateRequest,
    service: TransactionService = Depends(get_transaction_service),
):
    try:
        result = await service.create_transaction(
            body.seller_id, body.amount, body.payment_type, body.transaction_date,
        )
        return _to_response(result, success_status=status.HTTP_201_CREATED)
    except Exception as exc:
        return _unexpected(exc)


@app.put("/api/transactions/{txn_id}", summary="Update a transaction")
async def update_transaction(
    txn_id: int,
    body: TransactionUpdateRequest,
    service: TransactionService = Depends(get_transaction_service),
):
    try:
        result = await service.update_transaction_by_id(
            txn_id,
            body.seller_id,
            body.amount,
            body.payment_type,
            body.transaction_date,
            body.version,
        )
        return _to_response(result)
    except Exception as exc:
        return _unexpected(exc)


@app.delete("/api/transactions/{txn_id}", summary="Delete a transaction (deleteType=soft|hard)")
async def delete_transaction(
    txn_id: int,
    delete_type: Optional[str] = Query(default=None, alias="deleteType"),
    service: TransactionService = Depends(get_transaction_service),
):
    mode = _parse_delete_type(delete_type)
    if mode is None:
        return Response(status_code=status.HTTP_400_BAD_REQUEST)
    try:
        if mode == "soft":
            result = await service.delete_transaction_by_id_soft(txn_id)
        else:
            result = await service.delete_transaction_by_id_hard(txn_id)
    except Exception:
        logger.error("Deleting transaction %s failed", txn_id, exc_info=True)
        return Response(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)
    return _delete_status(result)


# ── Analytics ────────────────────────────────────────────────────────────────

@app.get("/api/analytics/top-seller", summary="Seller with the highest total in a period")
async def top_seller(
    start: datetime = Query(..., examples=["2026-01-01T00:00:00"]),
    end: datetime = Query(..., examples=["2026-01-31T23:59:59"]),
    service: AnalyticsService = Depends(get_analytics_service),
):
    try:
        return await service.find_top_seller_by_period(start, end)
    except Exception:
        logger.error("Top seller query failed", exc_info=True)
        return Response(status_code=status.HTTP_400_BAD_REQUEST)


@app.get("/api/analytics/low-performers", summary="Sellers whose period total is below an amount")
async def low_performers(
    amount: Decimal = Query(...),
    start: datetime = Query(...),
    end: datetime = Query(...),
    service: AnalyticsService = Depends(get_analytics_service),
):
    try:
        return await service.find_sellers_with_total_amount_less_than(amount, start, end)
    except Exception:
        logger.error("Low performer query failed", exc_info=True)
        return Response(status_code=status.HTTP_400_BAD_REQUEST)


@app.get("/api/analytics/best-period/{seller_id}", summary="Busiest transaction period of a seller")
async def best_period(
    seller_id: int,
    service: AnalyticsService = Depends(get_analytics_service),
):
    try:
        result = await service.find_best_transaction_period_for_seller(seller_id)
    except Exception:
        logger.error("Best period query for seller %s failed", seller_id, exc_info=True)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=jsonable_encoder(BestPeriodResult()),
        )
    if result.transaction_count == 0:
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content=jsonable_encoder(BestPeriodResult()),
        )
    return result


# ── Admin ─────────────────────────────────────────────────────────────────────

@app.post("/api/admin/seed", summary="Re-seed demo data")
def reseed():
    store.clear()
    seed(store)
    return {
        "status": "seeded",
        "sellers": len(store.sellers),
        "transactions": len(store.transactions),
    }
