from datetime import date

import pytest

from src.news_gateway.core import validation
from src.news_gateway.errors import ValidationFailed


def test_category_query_defaults() -> None:
    query = validation.category_query("technology")
    assert query.kind == "category"
    assert query.page == 1
    assert query.page_size == 20
    assert query.sort == "newest"
    assert query.from_date is None and query.to_date is None


def test_category_is_case_insensitive_and_shares_cache_key() -> None:
    upper = validation.category_query("Technology")
    lower = validation.category_query(" technology ")
    assert upper.category == "technology"
    assert upper.cache_key() == lower.cache_key()


def test_string_pagination_is_parsed_to_int() -> None:
    assert validation.category_query("business", "2", "10").cache_key() == validation.category_query(
        "business", 2, 10
    ).cache_key()


@pytest.mark.parametrize("category", ["", "politics", "tech", None])
def test_unknown_category_fails(category) -> None:
    with pytest.raises(ValidationFailed) as exc_info:
        validation.category_query(category)
    assert exc_info.value.code == "VAL_INVALID_FORMAT"


@pytest.mark.parametrize("page", ["0", 0, "-1", "abc", "1.5"])
def test_invalid_page_fails(page) -> None:
    with pytest.raises(ValidationFailed):
        validation.category_query("technology", page=page)


@pytest.mark.parametrize("limit", ["0", "51", "ten"])
def test_invalid_page_size_fails(limit) -> None:
    with pytest.raises(ValidationFailed):
        validation.category_query("technology", page_size=limit)


def test_page_size_bounds_accepted() -> None:
    assert validation.category_query("technology", page_size="1").page_size == 1
    assert validation.category_query("technology", page_size="50").page_size == 50


def test_search_text_minimum_length() -> None:
    with pytest.raises(ValidationFailed):
        validation.search_query("t")
    with pytest.raises(ValidationFailed):
        validation.search_query("  t  ")
    with pytest.raises(ValidationFailed):
        validation.search_query(None)
    assert validation.search_query("te").text == "te"


def test_search_text_whitespace_and_case_share_cache_key() -> None:
    a = validation.search_query("  Climate Change ")
    b = validation.search_query("climate change")
    assert a.text == "Climate Change"
    assert a.cache_key() == b.cache_key()


def test_search_defaults_to_relevance_sort() -> None:
    assert validation.search_query("ai").sort == "relevance"
    assert validation.search_query("ai").cache_key() == validation.search_query("ai", sort="Relevance").cache_key()


def test_date_range_parsing() -> None:
    query = validation.search_query("ai", from_date="2024-01-01", to_date="2024-01-31")
    assert query.from_date == date(2024, 1, 1)
    assert query.to_date == date(2024, 1, 31)


@pytest.mark.parametrize(
    "from_date,to_date",
    [
        ("2024/01/01", None),
        ("2024-02-30", None),
        (None, "yesterday"),
        ("2024-02-01", "2024-01-01"),
    ],
)
def test_invalid_dates_fail(from_date, to_date) -> None:
    with pytest.raises(ValidationFailed):
        validation.category_query("science", from_date=from_date, to_date=to_date)


def test_same_day_range_is_allowed() -> None:
    query = validation.category_query("science", from_date="2024-01-01", to_date="2024-01-01")
    assert query.from_date == query.to_date


def test_invalid_sort_fails() -> None:
    with pytest.raises(ValidationFailed):
        validation.category_query("health", sort="popular")
    assert validation.category_query("health", sort=" OLDEST ").sort == "oldest"


def test_article_query_requires_key() -> None:
    with pytest.raises(ValidationFailed):
        validation.article_query("   ")
    assert validation.article_query(" world/2024/jan/01/x ").article_id == "world/2024/jan/01/x"
