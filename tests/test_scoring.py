import pytest

from fincat.classifiers.explain import NO_MATCH_EXPLANATION, explain
from fincat.classifiers.scoring import score_category
from fincat.domain.taxonomy import Category, parse_pattern


@pytest.fixture
def coffee() -> Category:
    return Category(
        name="Coffee",
        keywords=("starbucks", "coffee", "cafe"),
        patterns=(parse_pattern("/coffee/i"), parse_pattern(r"/\bbar\b/i")),
        priority=8,
    )


def test_keyword_match_scales_with_priority(coffee: Category) -> None:
    result = score_category("starbucks 1234", coffee)
    # keyword 10*8, plus 3 for the token "starbucks" inside the keyword
    assert result.score == 83
    assert result.evidence == ("starbucks",)


def test_pattern_match_is_tagged(coffee: Category) -> None:
    result = score_category("the coffee bar", coffee)
    # coffee keyword 80, two patterns 40 each, "coffee" token inside keyword 3
    assert result.score == 163
    assert result.evidence == ("coffee", "pattern:coffee", r"pattern:\bbar\b")


def test_partial_word_credit_without_evidence(coffee: Category) -> None:
    result = score_category("star", coffee)
    assert result.score == 3
    assert result.evidence == ()


def test_short_tokens_get_no_partial_credit(coffee: Category) -> None:
    assert score_category("sta caf", coffee).score == 0


def test_partial_credit_counts_every_keyword() -> None:
    category = Category(name="Fuel", keywords=("shell", "shellfuel"), patterns=(), priority=1)
    result = score_category("hell", category)
    assert result.score == 6
    assert result.evidence == ()


def test_no_match_scores_zero(coffee: Category) -> None:
    result = score_category("xyzqw random 99", coffee)
    assert result.score == 0
    assert result.evidence == ()


def test_explain_cites_first_three_keywords() -> None:
    evidence = ["starbucks", "pattern:coffee", "coffee", "cafe", "dunkin"]
    assert explain(evidence, "Coffee") == "Matched keywords: starbucks, coffee, cafe"


def test_explain_pattern_only() -> None:
    assert explain(["pattern:coffee"], "Coffee") == "Pattern-based match for Coffee"


def test_explain_no_evidence() -> None:
    assert explain([], "Coffee") == NO_MATCH_EXPLANATION
    assert NO_MATCH_EXPLANATION == "No strong matches found. Consider reviewing manually."
