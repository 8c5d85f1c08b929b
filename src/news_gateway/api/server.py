from datetime import datetime, timezone
from typing import Any, Optional

from fastapi import Depends, FastAPI, Header, Query, Request
from fastapi.responses import JSONResponse

from ..config import settings
from ..core.access import AdminPolicy, Identity, IdentityVerifier, StaticTokenVerifier, parse_bearer
from ..core.budget import RateBudget
from ..core.categories import categories_with_names
from ..core.gateway import NewsGateway
from ..core.personalization import PersonalizationResolver
from ..core.preferences import InMemoryPreferenceStore, PreferenceStore
from ..core.validation import category_query, search_query
from ..errors import GatewayError
from ..logging_config import get_logger
from ..tools.cache import ResponseCache
from ..tools.guardian_client import GuardianClient


logger = get_logger("api.server")


def build_gateway(upstream=None) -> NewsGateway:
    """Wire a gateway from settings with fresh budget and cache state."""
    return NewsGateway(
        upstream=upstream or GuardianClient(),
        budget=RateBudget(settings.daily_request_limit),
        cache=ResponseCache(sweep_interval=settings.cache_sweep_interval_seconds),
        admin_policy=AdminPolicy(settings.admin_email_list, settings.admin_allow_when_unconfigured),
    )


def _ok(data: Any) -> dict:
    if hasattr(data, "model_dump"):
        data = data.model_dump(mode="json", by_alias=True)
    return {"success": True, "data": data}


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


def get_gateway(request: Request) -> NewsGateway:
    return request.app.state.gateway


def get_resolver(request: Request) -> PersonalizationResolver:
    return request.app.state.resolver


def get_current_identity(request: Request, authorization: Optional[str] = Header(None)) -> Identity:
    token = parse_bearer(authorization)
    verifier: IdentityVerifier = request.app.state.verifier
    return verifier.verify(token)


def create_app(
    gateway: Optional[NewsGateway] = None,
    verifier: Optional[IdentityVerifier] = None,
    preferences: Optional[PreferenceStore] = None,
) -> FastAPI:
    app = FastAPI(
        title="News Aggregation Gateway",
        description="Cached, budgeted gateway in front of the Guardian Content API",
        version="1.0.0",
    )
    app.state.gateway = gateway or build_gateway()
    app.state.verifier = verifier or StaticTokenVerifier()
    app.state.resolver = PersonalizationResolver(app.state.gateway, preferences or InMemoryPreferenceStore())

    @app.exception_handler(GatewayError)
    async def handle_gateway_error(request: Request, exc: GatewayError) -> JSONResponse:
        log = logger.warning if exc.status_code < 500 else logger.error
        log("request_failed", path=request.url.path, code=exc.code, error=exc.message)
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "success": False,
                "error": {"code": exc.code, "message": exc.message, "timestamp": _timestamp()},
            },
        )

    @app.get("/health")
    def health() -> dict:
        return {"status": "ok"}

    # Fixed paths must be registered before the /{category} catch-all.

    @app.get("/api/news/search")
    def search_news(
        q: Optional[str] = None,
        page: Optional[str] = None,
        limit: Optional[str] = None,
        from_date: Optional[str] = Query(None, alias="from"),
        to: Optional[str] = None,
        sort: Optional[str] = None,
        gateway: NewsGateway = Depends(get_gateway),
    ) -> dict:
        query = search_query(q, page, limit, from_date, to, sort)
        return _ok(gateway.fetch(query))

    @app.get("/api/news/categories")
    def list_categories() -> dict:
        return _ok(categories_with_names())

    @app.get("/api/news/article/{article_id:path}")
    def get_article(article_id: str, gateway: NewsGateway = Depends(get_gateway)) -> dict:
        return _ok(gateway.lookup_article(article_id))

    @app.get("/api/news/stats/rate-limit")
    def rate_limit_stats(
        identity: Identity = Depends(get_current_identity),
        gateway: NewsGateway = Depends(get_gateway),
    ) -> dict:
        return _ok(gateway.rate_limit_stats())

    @app.post("/api/news/cache/clear")
    def clear_cache(
        identity: Identity = Depends(get_current_identity),
        gateway: NewsGateway = Depends(get_gateway),
    ) -> dict:
        removed = gateway.clear_cache(identity)
        return {"success": True, "message": "News cache cleared successfully", "data": {"removed": removed}}

    @app.get("/api/news")
    def personalized_news(
        page: Optional[str] = None,
        limit: Optional[str] = None,
        from_date: Optional[str] = Query(None, alias="from"),
        to: Optional[str] = None,
        sort: Optional[str] = None,
        identity: Identity = Depends(get_current_identity),
        resolver: PersonalizationResolver = Depends(get_resolver),
    ) -> dict:
        result = resolver.resolve(identity.user_id, page, limit, from_date, to, sort)
        return _ok(result)

    @app.get("/api/news/{category}")
    def news_by_category(
        category: str,
        page: Optional[str] = None,
        limit: Optional[str] = None,
        from_date: Optional[str] = Query(None, alias="from"),
        to: Optional[str] = None,
        sort: Optional[str] = None,
        gateway: NewsGateway = Depends(get_gateway),
    ) -> dict:
        query = category_query(category, page, limit, from_date, to, sort)
        return _ok(gateway.fetch(query))

    return app


app = create_app()
