# backend/main.py
from __future__ import annotations

from datetime import datetime
from typing import Any, Callable, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session, sessionmaker

from config.app_config import AppConfig, load_app_config
from db import create_db_engine, make_session_factory
from routes.admin_ad import router as admin_ad_router
from routes.admin_article import router as admin_article_router
from routes.admin_category import router as admin_category_router
from routes.admin_company import router as admin_company_router
from routes.admin_event import router as admin_event_router
from routes.admin_location import router as admin_location_router
from routes.admin_page import router as admin_page_router
from routes.admin_studio import router as admin_studio_router
from routes.public_article import router as public_article_router
from routes.public_category import router as public_category_router
from routes.public_event import router as public_event_router
from routes.public_page import router as public_page_router
from schemas.response import fail
from services.auth import validate_auth_config_on_startup
from services.errors import (
    ConfigError,
    IndexSyncError,
    NotFoundError,
    TransientStoreError,
    ValidationError,
)
from services.search_client import SearchIndexClient
from util.jsonlog import get_logger, log_event
from util.time import utcnow

logger = get_logger("app")

_ROUTERS = (
    admin_event_router,
    admin_ad_router,
    admin_article_router,
    admin_category_router,
    admin_company_router,
    admin_location_router,
    admin_studio_router,
    admin_page_router,
    public_event_router,
    public_article_router,
    public_category_router,
    public_page_router,
)


def _request_errors(exc: RequestValidationError) -> list[str]:
    out = []
    for err in exc.errors():
        loc = [str(x) for x in err.get("loc", ()) if x not in ("body", "query", "path")]
        out.append(f"{'.'.join(loc) or 'request'}: {err.get('msg', 'invalid')}")
    return out


def _install_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(RequestValidationError)
    async def _request_validation(request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=400, content=fail(_request_errors(exc)))

    @app.exception_handler(ValidationError)
    async def _validation(request: Request, exc: ValidationError):
        return JSONResponse(status_code=400, content=fail(exc.errors))

    @app.exception_handler(NotFoundError)
    async def _not_found(request: Request, exc: NotFoundError):
        return JSONResponse(status_code=404, content=fail(exc.message))

    @app.exception_handler(TransientStoreError)
    async def _store(request: Request, exc: TransientStoreError):
        return JSONResponse(status_code=503, content=fail("Store temporarily unavailable"))

    @app.exception_handler(IndexSyncError)
    async def _index(request: Request, exc: IndexSyncError):
        return JSONResponse(status_code=502, content=fail("Search index unavailable"))

    @app.exception_handler(ConfigError)
    async def _config(request: Request, exc: ConfigError):
        return JSONResponse(status_code=503, content=fail(exc.message))


def create_app(
    config: Optional[AppConfig] = None,
    *,
    session_factory: Optional[sessionmaker[Session]] = None,
    index_client: Any = None,
    clock: Callable[[], datetime] = utcnow,
) -> FastAPI:
    """
    The process entry point owns the engine and the index client: both are
    created on startup (unless injected) and released on shutdown.
    """
    cfg = config or load_app_config()

    app = FastAPI(title="Cultura CMS Backend")
    app.state.config = cfg
    app.state.engine = None
    app.state.session_factory = session_factory
    app.state.index_client = index_client
    app.state.clock = clock

    for r in _ROUTERS:
        app.include_router(r)
    _install_error_handlers(app)

    @app.get("/health")
    def health():
        return {"status": "ok"}

    @app.on_event("startup")
    def on_startup():
        validate_auth_config_on_startup()

        if app.state.session_factory is None:
            engine = create_db_engine(
                cfg.database_url(),
                pool_size=cfg.database_pool_size(),
                max_overflow=cfg.database_max_overflow(),
            )
            app.state.engine = engine
            app.state.session_factory = make_session_factory(engine)

        if app.state.index_client is None:
            try:
                app.state.index_client = SearchIndexClient.from_config(cfg)
            except ConfigError as e:
                # admin CRUD keeps working; writes report indexed=false
                log_event(
                    logger,
                    level="WARN",
                    event="index_client_disabled",
                    msg="Search index client not configured",
                    error=e.message,
                )

    @app.on_event("shutdown")
    async def on_shutdown():
        client = app.state.index_client
        if isinstance(client, SearchIndexClient):
            await client.aclose()
        if app.state.engine is not None:
            app.state.engine.dispose()

    return app


app = create_app()
