from fincat.domain.text import normalize


def test_normalize_lowercases_and_strips_symbols() -> None:
    assert normalize("STARBUCKS STORE #1234") == "starbucks store 1234"
    assert normalize("NETFLIX.COM") == "netflix com"


def test_normalize_collapses_whitespace() -> None:
    assert normalize("  Whole\tFoods \n  Market  ") == "whole foods market"


def test_normalize_empty_and_punctuation_only() -> None:
    assert normalize("") == ""
    assert normalize("#$%^&*()!") == ""


def test_normalize_removes_currency_marks() -> None:
    assert normalize("€12,50 CAFÉ-Bar") == "12 50 caf bar"
