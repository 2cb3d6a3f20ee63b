from dataclasses import dataclass

from fincat.domain.taxonomy import Category

KEYWORD_WEIGHT = 10
PATTERN_WEIGHT = 5
PARTIAL_WORD_BONUS = 3
PARTIAL_WORD_MIN_LENGTH = 4

PATTERN_EVIDENCE_PREFIX = "pattern:"


@dataclass(frozen=True)
class CategoryScore:
    name: str
    score: int
    evidence: tuple[str, ...]


def is_pattern_evidence(entry: str) -> bool:
    return entry.startswith(PATTERN_EVIDENCE_PREFIX)


def score_category(normalized: str, category: Category) -> CategoryScore:
    """
    Score one category against already-normalized text.

    Three independent passes are summed:

    - every keyword contained in the text adds ``10 * priority`` and is recorded;
    - every pattern found in the text adds ``5 * priority`` and is recorded
      with a ``pattern:`` prefix;
    - every token of four or more characters that appears inside a keyword
      adds a flat 3 per keyword, with no evidence recorded.
    """
    score = 0
    evidence: list[str] = []

    for keyword in category.keywords:
        if keyword in normalized:
            score += KEYWORD_WEIGHT * category.priority
            evidence.append(keyword)

    for pattern in category.patterns:
        if pattern.search(normalized):
            score += PATTERN_WEIGHT * category.priority
            evidence.append(f"{PATTERN_EVIDENCE_PREFIX}{pattern.pattern}")

    # Partial words nudge ranking for truncated merchant names ("star" in "starbucks").
    for token in normalized.split():
        if len(token) < PARTIAL_WORD_MIN_LENGTH:
            continue
        for keyword in category.keywords:
            if token in keyword:
                score += PARTIAL_WORD_BONUS

    return CategoryScore(name=category.name, score=score, evidence=tuple(evidence))
