from collections.abc import Sequence

from .scoring import is_pattern_evidence

NO_MATCH_EXPLANATION = "No strong matches found. Consider reviewing manually."
MAX_CITED_KEYWORDS = 3


def explain(evidence: Sequence[str], category_name: str) -> str:
    if not evidence:
        return NO_MATCH_EXPLANATION

    keywords = [entry for entry in evidence if not is_pattern_evidence(entry)]
    if keywords:
        return f"Matched keywords: {', '.join(keywords[:MAX_CITED_KEYWORDS])}"

    return f"Pattern-based match for {category_name}"
