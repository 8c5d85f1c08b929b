import json
from datetime import date
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict


QueryKind = Literal["category", "search", "article"]
SortOrder = Literal["relevance", "newest", "oldest"]


class NewsQuery(BaseModel):
    """Canonical, validated request shape.

    Instances are built by ``core.validation``; the same value is used as
    the cache key and as the shape of the upstream call.
    """

    model_config = ConfigDict(frozen=True)

    kind: QueryKind
    category: Optional[str] = None
    text: Optional[str] = None
    article_id: Optional[str] = None
    page: int = 1
    page_size: int = 20
    from_date: Optional[date] = None
    to_date: Optional[date] = None
    sort: Optional[SortOrder] = None

    def cache_key(self) -> str:
        payload = self.model_dump(mode="json")
        # Upstream search is case-insensitive
        if payload["text"] is not None:
            payload["text"] = payload["text"].lower()
        return f"{self.kind}:" + json.dumps(payload, sort_keys=True, separators=(",", ":"))
