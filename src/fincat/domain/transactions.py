from __future__ import annotations

import time
import uuid
from datetime import datetime

from fincat.models import CategorizationResult, Transaction

DEFAULT_REVIEW_THRESHOLD = 0.9


def generate_transaction_id() -> str:
    return f"tx_{int(time.time() * 1000)}_{uuid.uuid4().hex[:9]}"


def build_transaction(
    text: str,
    result: CategorizationResult | None = None,
    *,
    timestamp: datetime | None = None,
) -> Transaction:
    return Transaction(
        id=generate_transaction_id(),
        text=text,
        timestamp=timestamp or datetime.now(),
        result=result,
    )


def needs_review(
    result: CategorizationResult | None,
    threshold: float = DEFAULT_REVIEW_THRESHOLD,
) -> bool:
    if result is None:
        return True
    return result.confidence < threshold


def matches_query(transaction: Transaction, query: str | None) -> bool:
    needle = (query or "").strip().lower()
    if not needle:
        return True
    if needle in transaction.text.lower():
        return True
    return transaction.result is not None and needle in transaction.result.category.lower()
