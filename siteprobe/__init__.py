import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse

from .config import Settings, get_settings
from .exceptions import AccessDenied
from .logging_utils import configure_logging
from .middleware import CanonicalHostMiddleware
from .routes import health
from .routes.health import NO_CACHE_HEADERS
from .siteconfig import resolve_site_config

__version__ = "0.1.0"

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # 啟動時解析一次 site 設定；格式錯誤直接讓啟動失敗
    site = resolve_site_config()
    app.state.site_config = site
    logger.info("site config resolved", extra={"site_config": site.masked()})
    yield


def create_app(settings: Settings | None = None) -> FastAPI:
    """
    沒傳 settings：每個 request 重新讀環境變數。
    有傳 settings：所有 request 都固定用這一份。
    """
    pinned = settings
    settings = settings or Settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title="SiteProbe",
        version=__version__,
        lifespan=lifespan,
    )

    if pinned is not None:
        app.dependency_overrides[get_settings] = lambda: pinned

    if settings.canonical_redirect_enabled:
        app.add_middleware(CanonicalHostMiddleware, primary_domain=settings.primary_domain)

    @app.exception_handler(AccessDenied)
    async def access_denied_handler(request: Request, exc: AccessDenied):
        # 404 而不是 403：不要讓人知道這個 endpoint 存在
        return PlainTextResponse("Not Found\n", status_code=404, headers=NO_CACHE_HEADERS)

    # router
    app.include_router(health.router, tags=["health"])

    return app
