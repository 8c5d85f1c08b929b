from datetime import datetime
from typing import Any, Dict, List, Optional
from urllib.parse import urlparse

import httpx
from pydantic import ValidationError

from ..config import settings
from ..core.categories import guardian_section
from ..errors import UpstreamError
from ..logging_config import get_logger
from ..models.news import Article, ArticleSource, NewsPage
from ..models.query import NewsQuery


logger = get_logger("tools.guardian_client")

_SEARCH_PATH = "/search"
_SHOW_FIELDS = "thumbnail,headline,trailText,bodyText"
_DESCRIPTION_CHARS = 200

# Raised while mapping a 2xx body that does not have the Guardian shape
_MAPPING_ERRORS = (AttributeError, TypeError, ValueError, ValidationError)

_PLACEHOLDER_KEYWORDS = {
    "business": "business",
    "technology": "technology",
    "science": "science",
    "sport": "sports",
    "sports": "sports",
    "culture": "culture",
    "entertainment": "culture",
    "society": "people",
    "health": "people",
    "world": "world",
    "politics": "politics",
    "environment": "nature",
}


def placeholder_image_url(category: str | None) -> str:
    keyword = _PLACEHOLDER_KEYWORDS.get((category or "").lower(), "news")
    return f"https://source.unsplash.com/800x600/?{keyword}"


def _parse_published_at(value: str | None):
    if not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None


def article_id_from_url(url: str) -> str:
    """Guardian content ids are the web URL path without the leading slash."""
    return urlparse(url).path.strip("/")


def _to_article(item: Dict[str, Any], category: str | None) -> Article:
    fields = item.get("fields") or {}
    body = fields.get("bodyText") or None
    section_id = item.get("sectionId") or None
    resolved_category = category or (section_id.lower() if section_id else None)
    return Article(
        id=item.get("id") or item.get("webUrl") or "",
        title=fields.get("headline") or item.get("webTitle") or "No title",
        url=item.get("webUrl") or "",
        image_url=fields.get("thumbnail") or placeholder_image_url(section_id or category),
        published_at=_parse_published_at(item.get("webPublicationDate")),
        category=resolved_category,
        description=fields.get("trailText") or (body[:_DESCRIPTION_CHARS] if body else ""),
        content=body,
        source=ArticleSource(name=item.get("sectionName") or "The Guardian"),
    )


class GuardianClient:
    """Single-request client for the Guardian Content API search endpoint.

    Every method performs exactly one HTTP call bounded by ``timeout``.
    Transport failures and non-2xx answers surface as :class:`UpstreamError`.
    """

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
    ) -> None:
        self.api_key = api_key if api_key is not None else settings.guardian_api_key
        self.base_url = (base_url or settings.guardian_base_url).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.request_timeout_seconds

    def _get(self, params: Dict[str, Any]) -> Dict[str, Any]:
        params = {**params, "api-key": self.api_key or ""}
        url = self.base_url + _SEARCH_PATH
        try:
            response = httpx.get(url, params=params, timeout=self.timeout)
            response.raise_for_status()
        except httpx.TimeoutException as exc:
            raise UpstreamError(f"Guardian API request timed out after {self.timeout}s", reason="timeout") from exc
        except httpx.HTTPStatusError as exc:
            raise _status_error(exc.response.status_code) from exc
        except httpx.HTTPError as exc:
            raise UpstreamError("Network error: unable to reach the Guardian API", reason="network") from exc

        try:
            data = response.json()
        except ValueError as exc:
            raise UpstreamError("Guardian API returned a malformed body", reason="invalid_response") from exc
        if not isinstance(data, dict):
            raise UpstreamError("Guardian API returned a malformed body", reason="invalid_response")
        return data

    def _listing_params(self, query: NewsQuery) -> Dict[str, Any]:
        params: Dict[str, Any] = {
            "page": query.page,
            "page-size": query.page_size,
            "show-fields": _SHOW_FIELDS,
            "order-by": query.sort or "newest",
        }
        if query.from_date:
            params["from-date"] = query.from_date.isoformat()
        if query.to_date:
            params["to-date"] = query.to_date.isoformat()
        return params

    def fetch_category(self, query: NewsQuery) -> NewsPage:
        params = self._listing_params(query)
        section = guardian_section(query.category or "general")
        if section:
            params["section"] = section
        data = self._get(params)
        try:
            return _to_page(data, query, category=query.category)
        except _MAPPING_ERRORS as exc:
            raise _malformed(exc) from exc

    def search(self, query: NewsQuery) -> NewsPage:
        params = self._listing_params(query)
        params["q"] = query.text
        params["query-fields"] = "headline"
        data = self._get(params)
        try:
            return _to_page(data, query, category=None)
        except _MAPPING_ERRORS as exc:
            raise _malformed(exc) from exc

    def fetch_article(self, article_id: str) -> Optional[Article]:
        """Return the article with ``article_id`` or ``None`` if it does not exist."""
        try:
            data = self._get({"ids": article_id, "show-fields": _SHOW_FIELDS})
        except UpstreamError as exc:
            if exc.upstream_status == 404:
                return None
            raise
        try:
            results = _results(data)
            if not results:
                return None
            return _to_article(results[0], category=None)
        except _MAPPING_ERRORS as exc:
            raise _malformed(exc) from exc


def _status_error(status: int) -> UpstreamError:
    if status == 401:
        return UpstreamError("Invalid Guardian API key", reason="invalid_key", upstream_status=status)
    if status == 429:
        return UpstreamError("Guardian API rate limit exceeded", reason="upstream_rate_limit", upstream_status=status)
    if status >= 500:
        return UpstreamError("Guardian API server error", reason="server_error", upstream_status=status)
    return UpstreamError(f"Guardian API request failed with status {status}", reason="http_error", upstream_status=status)


def _malformed(exc: Exception) -> UpstreamError:
    return UpstreamError(f"Guardian API returned an unexpected payload: {exc}", reason="invalid_response")


def _results(data: Dict[str, Any]) -> List[Dict[str, Any]]:
    body = data.get("response") or {}
    results = body.get("results")
    return results if isinstance(results, list) else []


def _to_page(data: Dict[str, Any], query: NewsQuery, category: str | None) -> NewsPage:
    articles = [_to_article(item, category) for item in _results(data)]
    total = (data.get("response") or {}).get("total") or len(articles)
    return NewsPage(
        articles=articles,
        total_results=int(total),
        page=query.page,
        page_size=query.page_size,
    )
