from typing import Optional

from crm.models import (
    Seller,
    SellerResponse,
    Transaction,
    TransactionResponse,
)


def seller_to_response(seller: Optional[Seller]) -> Optional[SellerResponse]:
    if seller is None:
        return None
    return SellerResponse(
        id=seller.id,
        name=seller.name,
        contact_info=seller.contact_info,
        registration_date=seller.registration_date,
        version=seller.version,
    )


def transaction_to_response(txn: Optional[Transaction]) -> Optional[TransactionResponse]:
    if txn is None:
        return None
    return TransactionResponse(
        id=txn.id,
        seller=seller_to_response(txn.seller),
        amount=txn.amount,
        payment_type=txn.payment_type,
        transaction_date=txn.transaction_date,
        version=txn.version,
    )
