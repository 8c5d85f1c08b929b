from typing import Dict, Iterable, List, Optional


ALLOWED_CATEGORIES = (
    "business",
    "entertainment",
    "general",
    "health",
    "science",
    "sports",
    "technology",
)

# None means no section filter: search across all Guardian sections
GUARDIAN_SECTIONS: Dict[str, Optional[str]] = {
    "business": "business",
    "entertainment": "culture",
    "general": None,
    "health": "society",
    "science": "science",
    "sports": "sport",
    "technology": "technology",
}

DISPLAY_NAMES: Dict[str, str] = {code: code.capitalize() for code in ALLOWED_CATEGORIES}


def is_valid_category(category: object) -> bool:
    return isinstance(category, str) and category.strip().lower() in ALLOWED_CATEGORIES


def normalize_categories(categories: Iterable[object]) -> List[str]:
    """Lower-case, drop unknown values and de-duplicate, keeping order."""
    seen: List[str] = []
    for category in categories:
        if not is_valid_category(category):
            continue
        code = category.strip().lower()  # type: ignore[union-attr]
        if code not in seen:
            seen.append(code)
    return seen


def guardian_section(category: str) -> Optional[str]:
    return GUARDIAN_SECTIONS[category]


def categories_with_names() -> List[Dict[str, str]]:
    return [{"code": code, "name": DISPLAY_NAMES[code]} for code in ALLOWED_CATEGORIES]
