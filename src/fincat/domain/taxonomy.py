from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from pydantic import ValidationError

from fincat.models import UNCATEGORIZED, CategoryDefinition

MIN_PRIORITY = 1
MAX_PRIORITY = 10

# Flags that do not change whether a pattern is found somewhere in a string are
# accepted for compatibility with JavaScript-style literals and then ignored.
_PATTERN_FLAGS = {
    "i": re.IGNORECASE,
    "m": re.MULTILINE,
    "s": re.DOTALL,
    "g": 0,
    "u": 0,
    "y": 0,
}


class TaxonomyError(ValueError):
    """Raised when a taxonomy document fails validation."""

    def __init__(self, errors: list[str]) -> None:
        self.errors = errors
        super().__init__("Invalid taxonomy: " + "; ".join(errors))


@dataclass(frozen=True)
class Category:
    name: str
    keywords: tuple[str, ...]
    patterns: tuple[re.Pattern[str], ...]
    priority: int


def parse_pattern(raw: str) -> re.Pattern[str]:
    """
    Compile a serialized pattern.

    Accepts ``/body/flags`` or a bare body. Matching is always case-insensitive.
    Raises ValueError on malformed syntax or unknown flags.
    """
    body, flag_chars = raw, ""
    if raw.startswith("/"):
        end = raw.rfind("/")
        if end == 0:
            raise ValueError(f"unterminated pattern {raw!r}")
        body, flag_chars = raw[1:end], raw[end + 1:]

    if not body:
        raise ValueError("pattern must not be empty")

    flags = re.IGNORECASE
    for char in flag_chars:
        if char not in _PATTERN_FLAGS:
            raise ValueError(f"unknown pattern flag {char!r} in {raw!r}")
        flags |= _PATTERN_FLAGS[char]

    try:
        return re.compile(body, flags)
    except re.error as exc:
        raise ValueError(f"invalid pattern {raw!r}: {exc}") from exc


def format_pattern(pattern: re.Pattern[str]) -> str:
    flag_chars = "i"
    if pattern.flags & re.MULTILINE:
        flag_chars += "m"
    if pattern.flags & re.DOTALL:
        flag_chars += "s"
    return f"/{pattern.pattern}/{flag_chars}"


def _ordered_unique(values: Iterable[str]) -> tuple[str, ...]:
    return tuple(dict.fromkeys(values))


def to_definition(category: Category) -> CategoryDefinition:
    return CategoryDefinition(
        name=category.name,
        keywords=list(category.keywords),
        patterns=[format_pattern(p) for p in category.patterns],
        priority=category.priority,
    )


def _compile_category(definition: CategoryDefinition) -> tuple[Category | None, list[str]]:
    errors: list[str] = []

    name = definition.name.strip()
    if not name:
        errors.append("name must not be blank")
    elif name == UNCATEGORIZED:
        errors.append(f"name '{UNCATEGORIZED}' is reserved")

    if not MIN_PRIORITY <= definition.priority <= MAX_PRIORITY:
        errors.append(
            f"priority must be between {MIN_PRIORITY} and {MAX_PRIORITY}, got {definition.priority}"
        )

    keywords: list[str] = []
    for keyword in definition.keywords:
        if not keyword.strip():
            errors.append("keywords must not be blank")
            continue
        keywords.append(keyword.lower())

    patterns: dict[str, re.Pattern[str]] = {}
    for raw in definition.patterns:
        try:
            compiled = parse_pattern(raw)
        except ValueError as exc:
            errors.append(str(exc))
            continue
        patterns.setdefault(format_pattern(compiled), compiled)

    if errors:
        return None, errors

    return Category(
        name=name,
        keywords=_ordered_unique(keywords),
        patterns=tuple(patterns.values()),
        priority=definition.priority,
    ), []


def _format_validation_error(exc: ValidationError) -> list[str]:
    messages = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error["loc"]) or "category"
        messages.append(f"{location}: {error['msg']}")
    return messages


def build_taxonomy(entries: Iterable[Any]) -> tuple[Category, ...]:
    """
    Validate and compile a taxonomy.

    Entries may be ``Category`` values, ``CategoryDefinition`` models or plain
    mappings as found in a JSON document. Every problem is collected before a
    single ``TaxonomyError`` is raised, so a caller sees the whole list at once.
    """
    if not isinstance(entries, (list, tuple)):
        raise TaxonomyError(["taxonomy must be a list of categories"])

    categories: list[Category] = []
    errors: list[str] = []
    seen_names: set[str] = set()

    for index, entry in enumerate(entries):
        label = f"category {index}"
        if isinstance(entry, Category):
            definition = to_definition(entry)
        elif isinstance(entry, CategoryDefinition):
            definition = entry
        elif isinstance(entry, Mapping):
            try:
                definition = CategoryDefinition.model_validate(dict(entry))
            except ValidationError as exc:
                errors.extend(f"{label}: {msg}" for msg in _format_validation_error(exc))
                continue
        else:
            errors.append(f"{label}: must be an object, got {type(entry).__name__}")
            continue

        label = f"{label} ('{definition.name}')"
        category, category_errors = _compile_category(definition)
        if category is None:
            errors.extend(f"{label}: {msg}" for msg in category_errors)
            continue

        if category.name in seen_names:
            errors.append(f"{label}: duplicate category name")
            continue
        seen_names.add(category.name)
        categories.append(category)

    if errors:
        raise TaxonomyError(errors)
    return tuple(categories)


def dump_taxonomy(taxonomy: Iterable[Category]) -> list[dict[str, Any]]:
    return [to_definition(category).model_dump() for category in taxonomy]


# Order matters: equal scores resolve to the category listed first.
DEFAULT_TAXONOMY_DEFINITIONS: list[dict[str, Any]] = [
    {
        "name": "Coffee & Dining",
        "keywords": [
            "starbucks", "coffee", "cafe", "restaurant", "dining", "mcdonald",
            "burger", "pizza", "chipotle", "subway", "dunkin",
        ],
        "patterns": ["/coffee/i", "/cafe/i", "/restaurant/i", "/dine/i", r"/\bbar\b/i"],
        "priority": 8,
    },
    {
        "name": "Shopping",
        "keywords": ["amazon", "shop", "store", "retail", "walmart", "target", "ebay", "etsy", "mall"],
        "patterns": ["/shop/i", "/store/i", "/retail/i", "/mall/i"],
        "priority": 7,
    },
    {
        "name": "Fuel & Transportation",
        "keywords": [
            "shell", "gas", "fuel", "uber", "lyft", "taxi", "chevron", "exxon",
            "bp", "mobil", "transit", "metro",
        ],
        "patterns": [r"/\bgas\b/i", "/fuel/i", "/uber/i", "/lyft/i", "/taxi/i", "/transit/i"],
        "priority": 9,
    },
    {
        "name": "Groceries",
        "keywords": [
            "whole foods", "grocery", "market", "food", "kroger", "safeway",
            "trader joe", "aldi", "costco", "supermarket",
        ],
        "patterns": ["/grocery/i", "/market/i", "/supermarket/i"],
        "priority": 8,
    },
    {
        "name": "Entertainment & Subscriptions",
        "keywords": [
            "netflix", "spotify", "subscription", "streaming", "hulu", "disney",
            "hbo", "apple music", "youtube premium",
        ],
        "patterns": ["/subscription/i", "/streaming/i", r"/\btv\b/i"],
        "priority": 9,
    },
    {
        "name": "Healthcare",
        "keywords": [
            "pharmacy", "doctor", "medical", "health", "cvs", "walgreens",
            "hospital", "clinic", "dentist",
        ],
        "patterns": ["/pharmacy/i", "/medical/i", "/health/i", "/doctor/i", r"/\bdr\./i"],
        "priority": 9,
    },
    {
        "name": "Utilities",
        "keywords": [
            "electric", "water", "internet", "utility", "power", "gas bill",
            "comcast", "verizon", "att",
        ],
        "patterns": ["/electric/i", "/utility/i", "/power/i", r"/\bgas bill/i"],
        "priority": 8,
    },
    {
        "name": "Travel & Accommodation",
        "keywords": ["hotel", "airbnb", "flight", "booking", "airline", "expedia", "marriott", "hilton"],
        "patterns": ["/hotel/i", "/flight/i", "/airline/i", "/travel/i"],
        "priority": 7,
    },
    {
        "name": "Insurance",
        "keywords": ["insurance", "geico", "state farm", "allstate", "progressive"],
        "patterns": ["/insurance/i"],
        "priority": 8,
    },
    {
        "name": "Education",
        "keywords": ["tuition", "school", "university", "college", "education", "coursera", "udemy"],
        "patterns": ["/tuition/i", "/school/i", "/university/i", "/college/i"],
        "priority": 7,
    },
    {
        "name": "Financial Services",
        "keywords": ["bank", "atm", "transfer", "payment", "paypal", "venmo", "zelle", "fee"],
        "patterns": [r"/\bbank\b/i", r"/\batm\b/i", "/transfer/i", r"/\bfee\b/i"],
        "priority": 6,
    },
    {
        "name": "Personal Care",
        "keywords": ["salon", "spa", "gym", "fitness", "beauty", "haircut", "massage"],
        "patterns": ["/salon/i", r"/\bgym\b/i", "/fitness/i", "/spa/i"],
        "priority": 6,
    },
]

DEFAULT_TAXONOMY: tuple[Category, ...] = build_taxonomy(DEFAULT_TAXONOMY_DEFINITIONS)
