"""
Deterministic demo-data generator.

Produces:
  - 4 sellers, the last one soft-deleted
  - 120 transactions spread over Jan 2026
    - ~45 % card, ~35 % cash, ~20 % transfer
    - ~10 % soft-deleted
  - Seller 3 gets no transactions at all (shows up as a low performer)
"""

import logging
import random
from datetime import datetime, timedelta
from decimal import Decimal

from crm.models import PaymentType, Seller, Transaction
from crm.store import DataStore

logger = logging.getLogger(__name__)

SEED = 42
START = datetime(2026, 1, 1)
END   = datetime(2026, 1, 31, 23, 59, 59)


def _rand_dt(rng: random.Random, lo: datetime = START, hi: datetime = END) -> datetime:
    delta = hi - lo
    secs = rng.randint(0, int(delta.total_seconds()))
    return lo + timedelta(seconds=secs)


def seed(store: DataStore) -> None:
    rng = random.Random(SEED)

    # ── sellers ──────────────────────────────────────────────────────────────
    registered = START - timedelta(days=90)
    sellers = [
        store.save_seller(Seller(
            name="Batik Nusantara",
            contact_info="finance@batiknusantara.id",
            registration_date=registered,
        )),
        store.save_seller(Seller(
            name="Thai Silk House",
            contact_info="accounts@thaisilkhouse.th",
            registration_date=registered + timedelta(days=3),
        )),
        store.save_seller(Seller(
            name="Hanoi Crafts",
            contact_info="billing@hanoicrafts.vn",
            registration_date=registered + timedelta(days=10),
        )),
        store.save_seller(Seller(
            name="Closed Shop",
            contact_info="nobody@closedshop.example",
            registration_date=registered,
            deleted=True,
        )),
    ]
    active = sellers[:2]

    # ── transactions ─────────────────────────────────────────────────────────
    total = 120
    payment_pool = (
        [PaymentType.CARD] * 9 + [PaymentType.CASH] * 7 + [PaymentType.TRANSFER] * 4
    )

    for _ in range(total):
        seller = rng.choice(active)
        store.save_transaction(Transaction(
            seller=seller,
            amount=Decimal(str(round(rng.uniform(5, 2_500), 2))),
            payment_type=rng.choice(payment_pool),
            transaction_date=_rand_dt(rng),
            deleted=rng.random() < 0.10,
        ))

    logger.info("Seeded %d sellers and %d transactions", len(sellers), total)
