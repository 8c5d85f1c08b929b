from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class _WireModel(BaseModel):
    """Base for models exposed over the API with camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class ArticleSource(_WireModel):
    name: str


class Article(_WireModel):
    id: str
    title: str
    url: str
    image_url: Optional[str] = None
    published_at: Optional[datetime] = None
    category: Optional[str] = None
    description: str = ""
    content: Optional[str] = None
    source: ArticleSource = ArticleSource(name="The Guardian")


class NewsPage(_WireModel):
    articles: List[Article] = []
    total_results: int = 0
    page: int = 1
    page_size: int = 20


class RateLimitStats(_WireModel):
    daily_count: int
    remaining: int
    daily_limit: int
    budget_date: date
