"""Shared fakes for gateway tests. No test here touches the network."""

from datetime import datetime, timedelta, timezone

import pytest

from src.news_gateway.core.access import AdminPolicy
from src.news_gateway.core.budget import RateBudget
from src.news_gateway.core.gateway import NewsGateway
from src.news_gateway.errors import UpstreamError
from src.news_gateway.models.news import Article, NewsPage
from src.news_gateway.tools.cache import ResponseCache


class FakeUpstream:
    """Stands in for GuardianClient and records every call it receives."""

    def __init__(self, by_category=None, articles=None):
        self.by_category = by_category or {}
        self.articles = {a.id: a for a in (articles or [])}
        self.calls = []
        self.error = None

    def _page(self, articles, query):
        start = (query.page - 1) * query.page_size
        return NewsPage(
            articles=articles[start:start + query.page_size],
            total_results=len(articles),
            page=query.page,
            page_size=query.page_size,
        )

    def fetch_category(self, query):
        self.calls.append(("category", query))
        if self.error:
            raise self.error
        return self._page(self.by_category.get(query.category, []), query)

    def search(self, query):
        self.calls.append(("search", query))
        if self.error:
            raise self.error
        matches = [a for a in self.articles.values() if query.text.lower() in a.title.lower()]
        return self._page(matches, query)

    def fetch_article(self, article_id):
        self.calls.append(("article", article_id))
        if self.error:
            raise self.error
        return self.articles.get(article_id)


class FakeClock:
    def __init__(self, now=0.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


def build_article(article_id, category="technology", hours_ago=0, title=None):
    return Article(
        id=article_id,
        title=title or f"Story {article_id}",
        url=f"https://www.theguardian.com/{article_id}",
        published_at=datetime(2024, 1, 15, 12, tzinfo=timezone.utc) - timedelta(hours=hours_ago),
        category=category,
        description="Summary",
    )


@pytest.fixture
def make_article():
    return build_article


@pytest.fixture
def upstream():
    tech = [build_article(f"technology/2024/jan/15/tech-{i}", "technology", hours_ago=i) for i in range(30)]
    business = [build_article(f"business/2024/jan/15/biz-{i}", "business", hours_ago=i) for i in range(30)]
    return FakeUpstream(
        by_category={"technology": tech, "business": business, "general": tech[:5] + business[:5]},
        articles=tech + business,
    )


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def gateway(upstream, clock):
    return NewsGateway(
        upstream=upstream,
        budget=RateBudget(daily_limit=5),
        cache=ResponseCache(clock=clock),
        admin_policy=AdminPolicy(["admin@example.com"]),
    )


@pytest.fixture
def upstream_error():
    return UpstreamError("Guardian API server error", reason="server_error", upstream_status=500)
