import json
import os
import threading
from collections import Counter
from datetime import datetime

from pydantic import TypeAdapter, ValidationError

from fincat.domain.transactions import matches_query
from fincat.logger import get_logger
from fincat.models import StorageStats, Transaction

logger = get_logger(__name__)

TRANSACTIONS_FILENAME = "transactions.json"
STATS_FILENAME = "stats.json"

_transactions_adapter = TypeAdapter(list[Transaction])


class StorageError(RuntimeError):
    pass


def compute_stats(transactions: list[Transaction]) -> StorageStats:
    categorized = [tx for tx in transactions if tx.result]
    counts = Counter(tx.result.category for tx in categorized if tx.result)
    total_confidence = sum(tx.result.confidence for tx in categorized if tx.result)
    return StorageStats(
        total_transactions=len(transactions),
        total_categorized=len(categorized),
        average_confidence=total_confidence / len(categorized) if categorized else 0.0,
        last_updated=datetime.now(),
        category_counts=dict(counts),
    )


class TransactionStore:
    def __init__(self, data_dir: str = "."):
        self.data_path = os.path.join(data_dir, TRANSACTIONS_FILENAME)
        self.stats_path = os.path.join(data_dir, STATS_FILENAME)
        self._lock = threading.RLock()

    def get_all(self) -> list[Transaction]:
        if not os.path.exists(self.data_path):
            return []
        try:
            with open(self.data_path, "rb") as f:
                return _transactions_adapter.validate_json(f.read())
        except OSError as e:
            logger.error(f"Error loading transactions from {self.data_path}: {e}")
            return []
        except (ValidationError, ValueError) as e:
            logger.error(f"Error loading transactions from {self.data_path}: {e}")
            self._set_aside_corrupt_file()
            return []

    def _set_aside_corrupt_file(self) -> None:
        """Rename an unreadable file so the next write does not overwrite it."""
        with self._lock:
            if not os.path.exists(self.data_path):
                return
            target = f"{self.data_path}.corrupt-{datetime.now():%Y%m%d%H%M%S%f}"
            try:
                os.replace(self.data_path, target)
            except OSError as e:
                logger.error(f"Could not move unreadable transactions file aside: {e}")
                return
            logger.warning(f"Moved unreadable transactions file to {target}")

    def get(self, transaction_id: str) -> Transaction | None:
        for tx in self.get_all():
            if tx.id == transaction_id:
                return tx
        return None

    def search(self, query: str | None) -> list[Transaction]:
        return [tx for tx in self.get_all() if matches_query(tx, query)]

    def save(self, transaction: Transaction) -> None:
        """Insert or replace by id. New transactions go first."""
        with self._lock:
            transactions = self.get_all()
            for index, tx in enumerate(transactions):
                if tx.id == transaction.id:
                    transactions[index] = transaction
                    break
            else:
                transactions.insert(0, transaction)
            self.save_all(transactions)

    def save_many(self, new_transactions: list[Transaction]) -> None:
        with self._lock:
            self.save_all(list(new_transactions) + self.get_all())

    def save_all(self, transactions: list[Transaction]) -> None:
        with self._lock:
            try:
                with open(self.data_path, "wb") as f:
                    f.write(_transactions_adapter.dump_json(transactions, indent=2))
            except OSError as e:
                logger.error(f"Error saving transactions: {e}")
                raise StorageError("Failed to save transactions. Storage may be full.") from e
            self._write_stats(compute_stats(transactions))

    def delete(self, transaction_id: str) -> bool:
        with self._lock:
            transactions = self.get_all()
            remaining = [tx for tx in transactions if tx.id != transaction_id]
            if len(remaining) == len(transactions):
                return False
            self.save_all(remaining)
            return True

    def delete_all(self) -> None:
        with self._lock:
            for path in (self.data_path, self.stats_path):
                if os.path.exists(path):
                    os.remove(path)

    def _write_stats(self, stats: StorageStats) -> None:
        try:
            with open(self.stats_path, "w", encoding="utf-8") as f:
                f.write(stats.model_dump_json(indent=2))
        except OSError as e:
            logger.error(f"Error saving stats: {e}")

    def get_stats(self) -> StorageStats:
        if not os.path.exists(self.stats_path):
            return StorageStats()
        try:
            with open(self.stats_path, encoding="utf-8") as f:
                return StorageStats.model_validate(json.load(f))
        except (OSError, ValidationError, json.JSONDecodeError) as e:
            logger.error(f"Error loading stats: {e}")
            return StorageStats()
