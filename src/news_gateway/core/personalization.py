import math
from typing import List, Optional, Sequence

from ..config import settings
from ..logging_config import get_logger
from ..models.news import Article, NewsPage
from .categories import normalize_categories
from .gateway import NewsGateway
from .preferences import PreferenceStore
from .validation import RawValue, category_query, parse_date_range, parse_page, parse_page_size, parse_sort


logger = get_logger("core.personalization")

# Each category contributes enough articles for this many merged pages
PREFETCH_PAGES = 3


class PersonalizationResolver:
    """Builds a single merged page from a user's preferred categories."""

    def __init__(
        self,
        gateway: NewsGateway,
        preferences: PreferenceStore,
        default_categories: Optional[Sequence[str]] = None,
    ) -> None:
        self.gateway = gateway
        self.preferences = preferences
        defaults = default_categories if default_categories is not None else settings.default_category_list
        self.default_categories = normalize_categories(defaults)
        if not self.default_categories:
            raise ValueError(f"default categories must name at least one allowed category: {list(defaults)}")

    def categories_for(self, user_id: str) -> List[str]:
        try:
            stored = self.preferences.get_categories(user_id)
        except Exception as exc:  # the store is an external collaborator
            logger.warning("preferences_unavailable", user_id=user_id, error=str(exc))
            stored = None
        categories = normalize_categories(stored or [])
        return categories or list(self.default_categories)

    def resolve(
        self,
        user_id: str,
        page: RawValue = None,
        page_size: RawValue = None,
        from_date: RawValue = None,
        to_date: RawValue = None,
        sort: RawValue = None,
    ) -> NewsPage:
        page_number = parse_page(page)
        size = parse_page_size(page_size)
        start, end = parse_date_range(from_date, to_date)
        order = parse_sort(sort, "newest")

        categories = self.categories_for(user_id)
        per_category = min(settings.max_page_size, math.ceil(size * PREFETCH_PAGES / len(categories)))

        merged: List[Article] = []
        seen = set()
        total_available = 0
        for category in categories:
            query = category_query(category, 1, per_category, start, end, order)
            result = self.gateway.fetch(query)
            total_available += result.total_results
            for article in result.articles:
                if article.id in seen:
                    continue
                seen.add(article.id)
                merged.append(article)

        merged = _sort_articles(merged, order)
        offset = (page_number - 1) * size
        logger.info(
            "personalized_news",
            user_id=user_id,
            categories=categories,
            merged=len(merged),
            page=page_number,
        )
        return NewsPage(
            articles=merged[offset:offset + size],
            total_results=max(len(merged), total_available),
            page=page_number,
            page_size=size,
        )


def _sort_articles(articles: List[Article], order: str) -> List[Article]:
    if order == "relevance":
        return articles

    def timestamp(article: Article) -> float:
        return article.published_at.timestamp() if article.published_at else 0.0

    return sorted(articles, key=timestamp, reverse=(order == "newest"))
