"""Gateway orchestrator: cache first, then budget, then upstream.

The orchestrator owns no global state. The budget tracker and response
cache are passed in so each app (or test) gets isolated instances.
"""

from typing import Dict, Optional, Sequence
from urllib.parse import urlparse

from ..config import settings
from ..errors import ArticleNotFound, RateLimitExceeded, UpstreamError
from ..logging_config import get_logger
from ..models.news import Article, NewsPage, RateLimitStats
from ..models.query import NewsQuery
from ..tools.cache import ResponseCache
from ..tools.guardian_client import article_id_from_url
from .access import AdminPolicy, Identity
from .budget import RateBudget
from .validation import article_query


logger = get_logger("core.gateway")

def _configured_ttls() -> Dict[str, float]:
    return {
        "category": settings.category_cache_ttl_seconds,
        "search": settings.search_cache_ttl_seconds,
        "article": settings.article_cache_ttl_seconds,
    }


def _is_url(value: str) -> bool:
    return value.lower().startswith(("http://", "https://"))


def _host(url: str) -> str:
    return (urlparse(url).hostname or "").lower()


def _same_url(requested: str, canonical: str, web_hosts: Sequence[str]) -> bool:
    # Any two configured Guardian hosts serve the same content path
    a, b = _host(requested), _host(canonical)
    same_host = a == b or (a in web_hosts and b in web_hosts)
    return same_host and urlparse(requested).path.rstrip("/") == urlparse(canonical).path.rstrip("/")


class NewsGateway:
    def __init__(
        self,
        upstream,
        budget: RateBudget,
        cache: ResponseCache,
        admin_policy: Optional[AdminPolicy] = None,
        ttls: Optional[Dict[str, float]] = None,
        web_hosts: Optional[Sequence[str]] = None,
    ) -> None:
        self.upstream = upstream
        self.budget = budget
        self.cache = cache
        self.admin_policy = admin_policy or AdminPolicy()
        self.ttls = {**_configured_ttls(), **(ttls or {})}
        hosts = web_hosts if web_hosts is not None else settings.guardian_web_host_list
        self.web_hosts = [host.lower() for host in hosts]
        for kind, ttl in self.ttls.items():
            if ttl <= 0:
                raise ValueError(f"TTL for {kind} must be > 0")

    def _reserve(self, query: NewsQuery) -> None:
        decision = self.budget.try_consume()
        if not decision.permitted:
            logger.warning("rate_limit_exceeded", cache_key=query.cache_key(), remaining=decision.remaining)
            raise RateLimitExceeded(
                f"Daily rate limit exceeded ({self.budget.daily_limit} requests/day). Please try again later.",
                details={"remaining": decision.remaining},
            )
        logger.info("upstream_request", kind=query.kind, cache_key=query.cache_key(), remaining=decision.remaining)

    def fetch(self, query: NewsQuery) -> NewsPage:
        """Return the page for a category or search query."""
        if query.kind == "article":
            raise ValueError("article queries go through lookup_article()")

        cached = self.cache.get(query)
        if cached is not None:
            logger.info("cache_hit", cache_key=query.cache_key())
            return cached
        logger.info("cache_miss", cache_key=query.cache_key())

        self._reserve(query)
        try:
            if query.kind == "category":
                page = self.upstream.fetch_category(query)
            else:
                page = self.upstream.search(query)
        except UpstreamError as exc:
            logger.error("upstream_error", cache_key=query.cache_key(), reason=exc.reason, error=exc.message)
            raise

        self.cache.put(query, page, self.ttls[query.kind])
        logger.info(
            "news_fetched",
            cache_key=query.cache_key(),
            articles=len(page.articles),
            total_results=page.total_results,
        )
        return page

    def lookup_article(self, id_or_url: str) -> Article:
        """Resolve an article by Guardian content id or by its web URL."""
        requested = article_query(id_or_url).article_id or ""
        by_url = _is_url(requested)
        article_id = article_id_from_url(requested) if by_url else requested
        if not article_id:
            raise ArticleNotFound("Article not found")
        if by_url and _host(requested) not in self.web_hosts:
            logger.info("article_foreign_host", url=requested)
            raise ArticleNotFound("Article not found")

        query = NewsQuery(kind="article", article_id=article_id, page=1, page_size=1)
        article = self.cache.get(query)
        if article is None:
            logger.info("cache_miss", cache_key=query.cache_key())
            self._reserve(query)
            try:
                article = self.upstream.fetch_article(article_id)
            except UpstreamError as exc:
                logger.error("upstream_error", cache_key=query.cache_key(), reason=exc.reason, error=exc.message)
                raise
            if article is None:
                logger.info("article_not_found", article_id=article_id)
                raise ArticleNotFound("Article not found")
            self.cache.put(query, article, self.ttls["article"])
        else:
            logger.info("cache_hit", cache_key=query.cache_key())

        if by_url and not _same_url(requested, article.url, self.web_hosts):
            raise ArticleNotFound("Article not found")
        return article

    def clear_cache(self, identity: Identity) -> int:
        self.admin_policy.require_admin(identity)
        removed = self.cache.clear()
        logger.info("cache_cleared", user_id=identity.user_id, removed=removed)
        return removed

    def rate_limit_stats(self) -> RateLimitStats:
        stats = self.budget.stats()
        logger.debug("rate_limit_stats", daily_count=stats.daily_count, remaining=stats.remaining)
        return stats
