import json
from collections.abc import Sequence
from typing import Any

from fincat.core import settings
from fincat.domain.transactions import DEFAULT_REVIEW_THRESHOLD, build_transaction, needs_review
from fincat.logger import get_logger
from fincat.manager import CategorizerService
from fincat.models import Transaction, UserFeedback
from fincat.storage.transactions import TransactionStore

logger = get_logger(__name__)


class BatchInputError(ValueError):
    pass


class BatchLimitError(BatchInputError):
    pass


def parse_batch_input(content: str) -> list[str]:
    """
    Extract transaction texts from uploaded content.

    A JSON array yields its strings, or the ``text``/``description`` of its
    objects. Any other content is read as one transaction per line.
    """
    stripped = content.strip()
    data: Any = None
    if stripped[:1] in {"[", "{"}:
        try:
            data = json.loads(stripped)
        except ValueError:
            data = None
        else:
            if not isinstance(data, list):
                raise BatchInputError("Invalid JSON format. Expected array of transactions.")

    if data is None:
        return [line.strip() for line in stripped.splitlines() if line.strip()]

    texts: list[str] = []
    for item in data:
        if isinstance(item, str):
            text = item
        elif isinstance(item, dict):
            text = str(item.get("text") or item.get("description") or "")
        else:
            text = str(item)
        if text.strip():
            texts.append(text.strip())
    return texts


class CategorizationPipeline:
    def __init__(
        self,
        service: CategorizerService,
        store: TransactionStore,
        *,
        review_threshold: float = DEFAULT_REVIEW_THRESHOLD,
        batch_limit: int = settings.DEFAULT_BATCH_LIMIT,
    ) -> None:
        self.service = service
        self.store = store
        self.review_threshold = review_threshold
        self.batch_limit = batch_limit

    def categorize_text(self, text: str, *, persist: bool = True) -> Transaction:
        result = self.service.categorize(text)
        transaction = build_transaction(text, result)
        if persist:
            self.store.save(transaction)
        logger.debug(
            "[CATEGORIZE] %s -> '%s' (confidence %.2f)",
            transaction.id,
            result.category,
            result.confidence,
        )
        return transaction

    def categorize_batch(self, texts: Sequence[str], *, persist: bool = True) -> list[Transaction]:
        cleaned = [text.strip() for text in texts if text and text.strip()]
        if not cleaned:
            raise BatchInputError("Please enter at least one transaction")
        if len(cleaned) > self.batch_limit:
            raise BatchLimitError(f"Maximum {self.batch_limit} transactions per batch")

        results = self.service.batch_categorize(cleaned)
        transactions = [build_transaction(text, result) for text, result in zip(cleaned, results)]
        if persist:
            self.store.save_many(transactions)

        flagged = sum(1 for tx in transactions if self.needs_review(tx))
        logger.info(
            "[BATCH] Categorized %d transactions (%d need review).",
            len(transactions),
            flagged,
        )
        return transactions

    def needs_review(self, transaction: Transaction) -> bool:
        return needs_review(transaction.result, self.review_threshold)

    def review_queue(self) -> list[Transaction]:
        return [tx for tx in self.store.get_all() if self.needs_review(tx)]

    def record_feedback(self, transaction_id: str, feedback: UserFeedback) -> Transaction | None:
        transaction = self.store.get(transaction_id)
        if transaction is None:
            return None
        updated = transaction.model_copy(update={"user_feedback": feedback})
        self.store.save(updated)
        logger.info(
            "[FEEDBACK] Transaction %s: suggested '%s', corrected to '%s'.",
            transaction_id,
            transaction.result.category if transaction.result else None,
            feedback.correct_category,
        )
        return updated
