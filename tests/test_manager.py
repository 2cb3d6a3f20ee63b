import threading

import pytest

from fincat.domain.taxonomy import DEFAULT_TAXONOMY, TaxonomyError
from fincat.manager import CategorizerService
from fincat.models import UNCATEGORIZED

CUSTOM_TAXONOMY = [
    {"name": "Coffee", "keywords": ["espresso"], "patterns": [], "priority": 5},
    {"name": "Books", "keywords": ["bookshop"], "patterns": ["/novel/i"], "priority": 4},
]


@pytest.fixture
def service() -> CategorizerService:
    return CategorizerService()


def test_defaults_to_stock_taxonomy(service: CategorizerService) -> None:
    assert service.get_taxonomy() == DEFAULT_TAXONOMY
    assert service.categorize("NETFLIX.COM").category == "Entertainment & Subscriptions"


def test_custom_taxonomy_at_construction() -> None:
    service = CategorizerService(taxonomy=CUSTOM_TAXONOMY)
    assert [c.name for c in service.get_taxonomy()] == ["Coffee", "Books"]
    assert service.categorize("Espresso Bar").category == "Coffee"


def test_invalid_taxonomy_at_construction_raises() -> None:
    with pytest.raises(TaxonomyError):
        CategorizerService(taxonomy=[{"name": "Broken"}])


def test_batch_matches_individual_calls(service: CategorizerService) -> None:
    texts = ["SHELL OIL #4567", "NETFLIX.COM", "XYZQW RANDOM 99"]
    batch = service.batch_categorize(texts)
    single = [service.categorize(text) for text in texts]
    assert len(batch) == len(texts)
    for got, expected in zip(batch, single):
        assert (got.category, got.confidence, got.explanation) == (
            expected.category,
            expected.confidence,
            expected.explanation,
        )


def test_batch_of_nothing(service: CategorizerService) -> None:
    assert service.batch_categorize([]) == []


def test_update_taxonomy_applies_to_later_calls(service: CategorizerService) -> None:
    assert service.categorize("Espresso Bar").category != "Coffee"
    service.update_taxonomy(CUSTOM_TAXONOMY)
    assert service.categorize("Espresso Bar").category == "Coffee"
    assert service.categorize("NETFLIX.COM").category == UNCATEGORIZED


def test_failed_update_keeps_previous_taxonomy(service: CategorizerService) -> None:
    before = service.get_taxonomy()
    with pytest.raises(TaxonomyError):
        service.update_taxonomy([*CUSTOM_TAXONOMY, {**CUSTOM_TAXONOMY[0], "priority": 42}])
    assert service.get_taxonomy() is before
    assert service.categorize("NETFLIX.COM").category == "Entertainment & Subscriptions"


def test_reset_taxonomy(service: CategorizerService) -> None:
    service.update_taxonomy(CUSTOM_TAXONOMY)
    service.reset_taxonomy()
    assert service.get_taxonomy() == DEFAULT_TAXONOMY


def test_readers_see_whole_taxonomies_during_swaps(service: CategorizerService) -> None:
    # Each taxonomy maps "espresso netflix" to exactly one name.
    expected = {"Coffee", "Entertainment & Subscriptions"}
    seen: set[str] = set()
    stop = threading.Event()

    def reader() -> None:
        while not stop.is_set():
            seen.add(service.categorize("espresso netflix").category)

    threads = [threading.Thread(target=reader) for _ in range(4)]
    for thread in threads:
        thread.start()
    for _ in range(50):
        service.update_taxonomy(CUSTOM_TAXONOMY)
        service.reset_taxonomy()
    stop.set()
    for thread in threads:
        thread.join()

    assert seen <= expected
