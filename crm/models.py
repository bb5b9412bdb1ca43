from pydantic import AfterValidator, BaseModel, Field
from enum import Enum
from datetime import datetime, timezone
from decimal import Decimal
from typing import Annotated, Optional


class PaymentType(str, Enum):
    CASH = "CASH"
    CARD = "CARD"
    TRANSFER = "TRANSFER"


# ── Timestamps ───────────────────────────────────────────────────────────────

def to_naive_utc(value: datetime) -> datetime:
    """Stored and compared timestamps are naive UTC; aware values are converted."""
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def utc_now() -> datetime:
    return to_naive_utc(datetime.now(timezone.utc))


Timestamp = Annotated[datetime, AfterValidator(to_naive_utc)]


# ── Entities (persisted shapes) ──────────────────────────────────────────────

class Seller(BaseModel):
    id: Optional[int] = None  # assigned by the store on insert
    name: str
    contact_info: str
    registration_date: Timestamp
    deleted: bool = False
    version: int = 0


class Transaction(BaseModel):
    id: Optional[int] = None
    seller: Seller
    amount: Decimal
    payment_type: PaymentType
    transaction_date: Timestamp
    deleted: bool = False
    version: int = 0


# ── Request models ───────────────────────────────────────────────────────────

def _not_blank(value: str) -> str:
    if not value.strip():
        raise ValueError("must not be blank")
    return value


NonBlankStr = Annotated[str, AfterValidator(_not_blank)]


class SellerCreateRequest(BaseModel):
    name: NonBlankStr
    contact_info: NonBlankStr


class SellerUpdateRequest(BaseModel):
    name: NonBlankStr
    contact_info: NonBlankStr
    version: int


class TransactionCreateRequest(BaseModel):
    seller_id: int
    amount: Decimal = Field(..., ge=0)
    payment_type: PaymentType
    transaction_date: Optional[Timestamp] = None


class TransactionUpdateRequest(BaseModel):
    seller_id: Optional[int] = None  # omitted → keep the current seller
    amount: Decimal = Field(..., ge=0)
    payment_type: PaymentType
    transaction_date: Optional[Timestamp] = None
    version: int


# ── Response models ──────────────────────────────────────────────────────────

class SellerResponse(BaseModel):
    id: int
    name: str
    contact_info: str
    registration_date: Timestamp
    version: int


class TransactionResponse(BaseModel):
    id: int
    seller: Optional[SellerResponse] = None
    amount: Decimal
    payment_type: PaymentType
    transaction_date: Timestamp
    version: int


class SellerView(BaseModel):
    id: int
    name: str
    contact_info: str
    registration_date: Timestamp
    version: int


class TransactionFlatView(BaseModel):
    """A transaction row joined with a summary of its seller."""
    id: int
    amount: Decimal
    payment_type: PaymentType
    transaction_date: Timestamp
    version: int
    seller: SellerView


# ── Analytics ────────────────────────────────────────────────────────────────

class BestPeriodResult(BaseModel):
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    transaction_count: int = 0
