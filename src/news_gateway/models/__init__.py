from .news import Article, ArticleSource, NewsPage, RateLimitStats  # noqa: F401
from .query import NewsQuery, QueryKind, SortOrder  # noqa: F401
