"""Turn raw request parameters into a canonical :class:`NewsQuery`.

All functions here are pure. Any problem raises
:class:`~news_gateway.errors.ValidationFailed` (``VAL_INVALID_FORMAT``)
with a message naming the offending parameter.
"""

import re
from datetime import date
from typing import Optional, Tuple, Union

from ..config import settings
from ..errors import ValidationFailed
from ..models.query import NewsQuery
from .categories import ALLOWED_CATEGORIES


RawValue = Union[str, int, None]

SORT_ORDERS = ("newest", "oldest", "relevance")
MIN_SEARCH_LENGTH = 2

_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def _is_blank(value: RawValue) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def parse_page(value: RawValue) -> int:
    if _is_blank(value):
        return 1
    page = _parse_int(value, "page")
    if page < 1:
        raise ValidationFailed("Page must be a positive integer")
    return page


def parse_page_size(value: RawValue, *, default: Optional[int] = None, maximum: Optional[int] = None) -> int:
    default = settings.default_page_size if default is None else default
    maximum = settings.max_page_size if maximum is None else maximum
    if _is_blank(value):
        return default
    size = _parse_int(value, "limit")
    if size < 1 or size > maximum:
        raise ValidationFailed(f"Limit must be between 1 and {maximum}")
    return size


def _parse_int(value: RawValue, name: str) -> int:
    if isinstance(value, bool):
        raise ValidationFailed(f"{name} must be an integer")
    if isinstance(value, int):
        return value
    text = str(value).strip()
    if not re.fullmatch(r"[+-]?\d+", text):
        raise ValidationFailed(f"{name} must be an integer")
    return int(text)


def parse_category(value: RawValue) -> str:
    if _is_blank(value):
        raise ValidationFailed("Category is required")
    category = str(value).strip().lower()
    if category not in ALLOWED_CATEGORIES:
        raise ValidationFailed(f"Invalid category. Allowed: {', '.join(ALLOWED_CATEGORIES)}")
    return category


def parse_search_text(value: RawValue) -> str:
    text = "" if value is None else str(value).strip()
    if len(text) < MIN_SEARCH_LENGTH:
        raise ValidationFailed(f"Search query must be at least {MIN_SEARCH_LENGTH} characters")
    return text


def _parse_date(value: RawValue, name: str) -> Optional[date]:
    if _is_blank(value):
        return None
    text = str(value).strip()
    if not _DATE_RE.match(text):
        raise ValidationFailed(f"{name} date must be in YYYY-MM-DD format")
    try:
        return date.fromisoformat(text)
    except ValueError:
        raise ValidationFailed(f"Invalid {name} date") from None


def parse_date_range(from_value: RawValue, to_value: RawValue) -> Tuple[Optional[date], Optional[date]]:
    from_date = _parse_date(from_value, "From")
    to_date = _parse_date(to_value, "To")
    if from_date and to_date and from_date > to_date:
        raise ValidationFailed("From date must be before or equal to to date")
    return from_date, to_date


def parse_sort(value: RawValue, default: str) -> str:
    if _is_blank(value):
        return default
    sort = str(value).strip().lower()
    if sort not in SORT_ORDERS:
        raise ValidationFailed(f"Invalid sort option. Allowed values: {', '.join(SORT_ORDERS)}")
    return sort


def category_query(
    category: RawValue,
    page: RawValue = None,
    page_size: RawValue = None,
    from_date: RawValue = None,
    to_date: RawValue = None,
    sort: RawValue = None,
) -> NewsQuery:
    start, end = parse_date_range(from_date, to_date)
    return NewsQuery(
        kind="category",
        category=parse_category(category),
        page=parse_page(page),
        page_size=parse_page_size(page_size),
        from_date=start,
        to_date=end,
        sort=parse_sort(sort, "newest"),
    )


def search_query(
    text: RawValue,
    page: RawValue = None,
    page_size: RawValue = None,
    from_date: RawValue = None,
    to_date: RawValue = None,
    sort: RawValue = None,
) -> NewsQuery:
    search_text = parse_search_text(text)
    start, end = parse_date_range(from_date, to_date)
    return NewsQuery(
        kind="search",
        text=search_text,
        page=parse_page(page),
        page_size=parse_page_size(page_size),
        from_date=start,
        to_date=end,
        sort=parse_sort(sort, "relevance"),
    )


def article_query(article_id: RawValue) -> NewsQuery:
    if _is_blank(article_id):
        raise ValidationFailed("Article ID or URL is required")
    return NewsQuery(kind="article", article_id=str(article_id).strip(), page=1, page_size=1)
