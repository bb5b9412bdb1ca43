"""
Outcome types returned by the seller and transaction services.

Expected business outcomes (bad input, missing rows, stale versions, storage
failures) come back as one of these values instead of being raised, so callers
can ``match`` on the variant:

    match await sellers.get_seller_by_id(7):
        case Success(payload=seller): ...
        case NotFoundError(): ...
        case _: ...

Every variant answers ``message``, ``error_type`` and ``is_success``; success
carries no message and no error type.
"""

from enum import Enum
from typing import ClassVar, Generic, Optional, TypeVar, Union

from pydantic import BaseModel, ConfigDict

from crm.models import SellerResponse, TransactionResponse

T = TypeVar("T")


class ErrorType(str, Enum):
    VALIDATION_ERROR = "VALIDATION_ERROR"
    NOT_FOUND = "NOT_FOUND"
    SELLER_NOT_FOUND = "SELLER_NOT_FOUND"
    GENERIC_ERROR = "GENERIC_ERROR"


class Success(BaseModel, Generic[T]):
    model_config = ConfigDict(frozen=True)

    payload: Optional[T] = None  # None for hard deletes

    message: ClassVar[Optional[str]] = None
    error_type: ClassVar[Optional[ErrorType]] = None
    is_success: ClassVar[bool] = True


class _Failure(BaseModel):
    model_config = ConfigDict(frozen=True)

    message: str

    error_type: ClassVar[ErrorType]
    is_success: ClassVar[bool] = False


class ValidationError(_Failure):
    """Caller input broke a precondition, or the submitted version is stale."""
    error_type: ClassVar[ErrorType] = ErrorType.VALIDATION_ERROR


class NotFoundError(_Failure):
    """The entity is missing or soft-deleted."""
    error_type: ClassVar[ErrorType] = ErrorType.NOT_FOUND


class SellerNotFoundError(_Failure):
    """A transaction refers to a seller that is missing or soft-deleted."""
    error_type: ClassVar[ErrorType] = ErrorType.SELLER_NOT_FOUND


class GenericError(_Failure):
    """Storage failed, including write-time version conflicts."""
    error_type: ClassVar[ErrorType] = ErrorType.GENERIC_ERROR


SellerResult = Union[
    Success[SellerResponse],
    ValidationError,
    NotFoundError,
    GenericError,
]

TransactionResult = Union[
    Success[TransactionResponse],
    ValidationError,
    NotFoundError,
    SellerNotFoundError,
    GenericError,
]
