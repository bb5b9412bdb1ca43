"""
Tests for the result variants and the entity → response mapper.
"""

from datetime import datetime
from decimal import Decimal

import pytest

from crm.mapper import seller_to_response, transaction_to_response
from crm.models import PaymentType, Seller, Transaction
from crm.results import (
    ErrorType,
    GenericError,
    NotFoundError,
    SellerNotFoundError,
    Success,
    ValidationError,
)

REGISTERED = datetime(2025, 12, 1, 9, 30)


def seller(**overrides) -> Seller:
    fields = dict(
        id=3,
        name="Alice",
        contact_info="a@x.com",
        registration_date=REGISTERED,
        deleted=False,
        version=4,
    )
    fields.update(overrides)
    return Seller(**fields)


def describe(result) -> str:
    match result:
        case Success(payload=None):
            return "deleted"
        case Success():
            return "ok"
        case NotFoundError() | SellerNotFoundError():
            return "missing"
        case ValidationError() | GenericError():
            return "failed"


class TestVariants:
    @pytest.mark.parametrize("variant, error_type", [
        (ValidationError, ErrorType.VALIDATION_ERROR),
        (NotFoundError, ErrorType.NOT_FOUND),
        (SellerNotFoundError, ErrorType.SELLER_NOT_FOUND),
        (GenericError, ErrorType.GENERIC_ERROR),
    ])
    def test_failures_carry_message_and_type(self, variant, error_type):
        result = variant(message="something happened")
        assert result.message == "something happened"
        assert result.error_type is error_type
        assert not result.is_success

    def test_success_has_no_message_or_type(self):
        result = Success(payload=seller_to_response(seller()))
        assert result.is_success
        assert result.message is None
        assert result.error_type is None

    def test_variants_are_immutable(self):
        result = NotFoundError(message="gone")
        with pytest.raises(Exception):
            result.message = "back"

    def test_match_on_variants(self):
        assert describe(Success(payload=None)) == "deleted"
        assert describe(Success(payload=seller_to_response(seller()))) == "ok"
        assert describe(SellerNotFoundError(message="x")) == "missing"
        assert describe(GenericError(message="x")) == "failed"


class TestMapper:
    def test_seller_mapping(self):
        response = seller_to_response(seller(deleted=True))
        assert response.model_dump() == {
            "id": 3,
            "name": "Alice",
            "contact_info": "a@x.com",
            "registration_date": REGISTERED,
            "version": 4,
        }

    def test_transaction_mapping_embeds_seller(self):
        txn = Transaction(
            id=8,
            seller=seller(),
            amount=Decimal("12.50000"),
            payment_type=PaymentType.CARD,
            transaction_date=datetime(2026, 1, 2),
            version=2,
        )
        response = transaction_to_response(txn)
        assert response.id == 8
        assert response.seller.name == "Alice"
        assert response.amount == Decimal("12.5")
        assert response.payment_type is PaymentType.CARD
        assert response.version == 2

    def test_none_maps_to_none(self):
        assert seller_to_response(None) is None
        assert transaction_to_response(None) is None
