import threading
from collections.abc import Iterable, Sequence
from typing import Any

from fincat.classifiers.keyword import KeywordClassifier
from fincat.domain.taxonomy import DEFAULT_TAXONOMY, Category, build_taxonomy
from fincat.logger import get_logger
from fincat.models import CategorizationResult

logger = get_logger(__name__)


class CategorizerService:
    """
    Holds the active taxonomy and classifies against it.

    The classifier is an immutable snapshot of one taxonomy. Updates build a
    new classifier and swap the reference under a writer lock; readers take the
    reference once per call and never lock, so a call sees one taxonomy in full.
    """

    def __init__(self, taxonomy: Iterable[Any] | None = None):
        categories = DEFAULT_TAXONOMY if taxonomy is None else build_taxonomy(taxonomy)
        self._write_lock = threading.Lock()
        self.classifier = KeywordClassifier(categories)

    def categorize(self, text: str) -> CategorizationResult:
        return self.classifier.classify(text)

    def batch_categorize(self, texts: Sequence[str]) -> list[CategorizationResult]:
        classifier = self.classifier
        results = [classifier.classify(text) for text in texts]
        logger.debug("Batch of %d transactions categorized.", len(results))
        return results

    def get_taxonomy(self) -> tuple[Category, ...]:
        return self.classifier.taxonomy

    def update_taxonomy(self, taxonomy: Iterable[Any]) -> tuple[Category, ...]:
        """
        Replace the active taxonomy.

        Raises TaxonomyError and keeps the current taxonomy when validation fails.
        """
        return self.activate_taxonomy(build_taxonomy(taxonomy))

    def activate_taxonomy(self, categories: tuple[Category, ...]) -> tuple[Category, ...]:
        """Swap in categories that ``build_taxonomy`` already validated."""
        classifier = KeywordClassifier(categories)
        with self._write_lock:
            self.classifier = classifier
        logger.info("Taxonomy updated: %d categories.", len(categories))
        return categories

    def reset_taxonomy(self) -> tuple[Category, ...]:
        with self._write_lock:
            self.classifier = KeywordClassifier(DEFAULT_TAXONOMY)
        logger.info("Taxonomy reset to default.")
        return DEFAULT_TAXONOMY
