from collections.abc import Iterable
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal

from fincat.domain.taxonomy import Category
from fincat.domain.text import normalize
from fincat.logger import get_logger
from fincat.models import UNCATEGORIZED, CategorizationResult

from .base import Classifier
from .explain import explain
from .scoring import CategoryScore, score_category

logger = get_logger(__name__)

UNCATEGORIZED_CONFIDENCE = 0.5
BASE_CONFIDENCE = Decimal("0.75")
MAX_CONFIDENCE = Decimal("0.99")


def compute_confidence(top_score: int, second_score: int) -> float:
    """
    Map the margin between the two best scores to a confidence value.

    A zero top score is the fixed 0.5. Otherwise ``0.75 + margin / 100``,
    capped at 0.99 and rounded half-up to two places.
    """
    if top_score == 0:
        return UNCATEGORIZED_CONFIDENCE

    margin = Decimal(top_score - second_score) / 100
    confidence = min(MAX_CONFIDENCE, BASE_CONFIDENCE + margin)
    return float(confidence.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


class KeywordClassifier(Classifier):
    """Deterministic keyword/pattern scorer over a fixed taxonomy snapshot."""

    def __init__(self, taxonomy: Iterable[Category]):
        self.taxonomy: tuple[Category, ...] = tuple(taxonomy)

    def rank(self, text: str) -> list[CategoryScore]:
        normalized = normalize(text)
        scores = [score_category(normalized, category) for category in self.taxonomy]
        # sorted() is stable, so equal scores keep taxonomy order.
        return sorted(scores, key=lambda s: -s.score)

    def classify(self, text: str) -> CategorizationResult:
        ranked = self.rank(text)
        if not ranked:
            best = CategoryScore(name=UNCATEGORIZED, score=0, evidence=())
        else:
            best = ranked[0]
        second_score = ranked[1].score if len(ranked) > 1 else 0

        category = best.name if best.score > 0 else UNCATEGORIZED
        confidence = compute_confidence(best.score, second_score)

        logger.debug(
            "Scored '%s...': %s (score %d, runner-up %d, confidence %.2f)",
            text[:50],
            category,
            best.score,
            second_score,
            confidence,
        )

        return CategorizationResult(
            category=category,
            confidence=confidence,
            explanation=explain(best.evidence, best.name),
            timestamp=datetime.now(),
        )
