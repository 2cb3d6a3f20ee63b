from datetime import datetime
from pathlib import Path

import pytest

from fincat.models import CategorizationResult, Transaction
from fincat.storage.taxonomy import TaxonomyStore
from fincat.storage.transactions import StorageError, TransactionStore


def _tx(tx_id: str, text: str, category: str | None = None, confidence: float = 0.9) -> Transaction:
    result = None
    if category:
        result = CategorizationResult(category=category, confidence=confidence, explanation="test")
    return Transaction(id=tx_id, text=text, timestamp=datetime(2024, 1, 1, 12, 0), result=result)


@pytest.fixture
def store(tmp_path: Path) -> TransactionStore:
    return TransactionStore(data_dir=str(tmp_path))


def test_empty_store(store: TransactionStore) -> None:
    assert store.get_all() == []
    assert store.get("missing") is None
    assert store.get_stats().total_transactions == 0


def test_save_inserts_newest_first_and_persists(store: TransactionStore, tmp_path: Path) -> None:
    store.save(_tx("a", "SHELL OIL", "Fuel & Transportation"))
    store.save(_tx("b", "NETFLIX.COM", "Entertainment & Subscriptions"))

    reloaded = TransactionStore(data_dir=str(tmp_path))
    assert [tx.id for tx in reloaded.get_all()] == ["b", "a"]
    assert reloaded.get("a").result.category == "Fuel & Transportation"


def test_save_replaces_existing_in_place(store: TransactionStore) -> None:
    store.save(_tx("a", "SHELL OIL"))
    store.save(_tx("b", "NETFLIX.COM"))
    store.save(_tx("a", "SHELL OIL", "Fuel & Transportation"))
    assert [tx.id for tx in store.get_all()] == ["b", "a"]
    assert store.get("a").result is not None


def test_stats_follow_writes(store: TransactionStore) -> None:
    store.save_many([
        _tx("a", "SHELL OIL", "Fuel & Transportation", 0.99),
        _tx("b", "CHEVRON", "Fuel & Transportation", 0.85),
        _tx("c", "NETFLIX", "Entertainment & Subscriptions", 0.92),
        _tx("d", "pending"),
    ])
    stats = store.get_stats()
    assert stats.total_transactions == 4
    assert stats.total_categorized == 3
    assert stats.average_confidence == pytest.approx((0.99 + 0.85 + 0.92) / 3)
    assert stats.category_counts == {"Fuel & Transportation": 2, "Entertainment & Subscriptions": 1}


def test_delete(store: TransactionStore) -> None:
    store.save_many([_tx("a", "one"), _tx("b", "two")])
    assert store.delete("a") is True
    assert store.delete("a") is False
    assert [tx.id for tx in store.get_all()] == ["b"]
    assert store.get_stats().total_transactions == 1


def test_delete_all(store: TransactionStore) -> None:
    store.save(_tx("a", "one", "Shopping"))
    store.delete_all()
    assert store.get_all() == []
    assert store.get_stats().total_categorized == 0


def test_search_matches_text_or_category(store: TransactionStore) -> None:
    store.save_many([
        _tx("a", "SHELL OIL #4567", "Fuel & Transportation"),
        _tx("b", "NETFLIX.COM", "Entertainment & Subscriptions"),
        _tx("c", "Corner shop"),
    ])
    assert [tx.id for tx in store.search("shell")] == ["a"]
    assert [tx.id for tx in store.search("ENTERTAINMENT")] == ["b"]
    assert len(store.search("")) == 3


def test_corrupt_file_loads_empty(store: TransactionStore) -> None:
    with open(store.data_path, "w") as f:
        f.write("{not json")
    assert store.get_all() == []


def test_corrupt_file_is_kept_aside_on_next_save(store: TransactionStore, tmp_path: Path) -> None:
    Path(store.data_path).write_text("{not json")
    assert store.get_all() == []
    store.save(_tx("a", "SHELL OIL"))

    (kept,) = tmp_path.glob("transactions.json.corrupt-*")
    assert kept.read_text() == "{not json"
    assert [tx.id for tx in store.get_all()] == ["a"]


def test_write_failure_raises_storage_error(tmp_path: Path) -> None:
    store = TransactionStore(data_dir=str(tmp_path / "missing-dir"))
    with pytest.raises(StorageError, match="Storage may be full"):
        store.save(_tx("a", "one"))


def test_taxonomy_store_round_trip(tmp_path: Path) -> None:
    store = TaxonomyStore(data_dir=str(tmp_path))
    assert store.load() is None
    document = [{"name": "Coffee", "keywords": ["coffee"], "patterns": ["/cafe/i"], "priority": 8}]
    store.save(document)
    assert store.load() == document
    store.clear()
    assert store.load() is None


def test_taxonomy_store_write_failure_raises_storage_error(tmp_path: Path) -> None:
    store = TaxonomyStore(data_path=str(tmp_path))
    with pytest.raises(StorageError, match="Failed to save taxonomy"):
        store.save([])


def test_taxonomy_store_ignores_bad_documents(tmp_path: Path) -> None:
    store = TaxonomyStore(data_dir=str(tmp_path))
    Path(store.data_path).write_text("{broken")
    assert store.load() is None
    Path(store.data_path).write_text('{"name": "Coffee"}')
    assert store.load() is None
