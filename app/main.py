from __future__ import annotations

import logging
import os
import time

from fastapi import FastAPI, Request, Response
from starlette.middleware.sessions import SessionMiddleware

from app.auth_flow import AuthorizationFlow
from app.config import Settings
from app.posting import PostingController, Stager
from app.routes import oauth_callback, router
from app.state import SessionStore
from app.uploads import ensure_upload_dir
from app.x_client import XClient

logger = logging.getLogger("x-image-poster")
logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO").upper(), format="%(asctime)s %(levelname)s %(message)s")


def create_app(settings: Settings | None = None, client=None, stager: Stager | None = None) -> FastAPI:
    settings = settings or Settings.from_env()
    client = client or XClient(settings)
    store = SessionStore(max_age=settings.session_max_age)

    app = FastAPI(title="X Image Uploader")
    app.state.settings = settings
    app.state.session_store = store
    app.state.x_client = client
    app.state.auth_flow = AuthorizationFlow(settings, store, client)
    app.state.poster = PostingController(store, client, stager=stager, upload_dir=settings.upload_dir)

    app.add_middleware(
        SessionMiddleware,
        secret_key=settings.session_secret,
        max_age=settings.session_max_age,
        https_only=settings.session_https_only,
        same_site="lax",
    )

    @app.on_event("startup")
    def startup() -> None:
        ensure_upload_dir(settings.upload_dir)
        missing = settings.missing_credentials()
        if missing:
            logger.warning("config_missing keys=%s", ",".join(missing))
        logger.info("redirect_uri=%s callback_path=%s", settings.redirect_uri, settings.callback_path)
        for route in app.routes:
            methods = ",".join(sorted(getattr(route, "methods", None) or []))
            logger.info("route path=%s methods=%s", route.path, methods)

    @app.on_event("shutdown")
    def shutdown() -> None:
        close = getattr(client, "close", None)
        if callable(close):
            close()

    @app.middleware("http")
    async def log_requests(request: Request, call_next) -> Response:
        start_time = time.perf_counter()
        response_status = 500
        try:
            response = await call_next(request)
            response_status = response.status_code
            return response
        finally:
            duration_ms = (time.perf_counter() - start_time) * 1000
            logger.info(
                "request method=%s path=%s status=%s duration_ms=%.2f",
                request.method,
                request.url.path,
                response_status,
                duration_ms,
            )

    @app.get("/health")
    def health() -> dict[str, bool]:
        return {"ok": True}

    @app.head("/health")
    def health_head() -> Response:
        return Response(status_code=200)

    app.include_router(router)
    app.add_api_route(settings.callback_path, oauth_callback, methods=["GET"])
    return app


app = create_app()
