from dotenv import load_dotenv
load_dotenv()

import logging
import sys
from contextlib import asynccontextmanager
from datetime import timedelta
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exception_handlers import http_exception_handler
from itsdangerous import Signer
from starlette.exceptions import HTTPException as StarletteHTTPException

from config import Settings
from facts import ProcessFacts
from manifest import ManifestError, resolve_manifest
from pipeline import NotFound, PipelineMiddleware, default_stages
from pipeline.errors import error_response
from routes import health, home, info
from store import SessionStore

logger = logging.getLogger(__name__)


async def not_found_for_unmatched_method(request: Request, exc: StarletteHTTPException):
    # A known path with the wrong method is just another unmatched route.
    if exc.status_code == 405:
        return error_response(NotFound())
    return await http_exception_handler(request, exc)


def create_app(
    settings: Optional[Settings] = None,
    store: Optional[SessionStore] = None,
    facts: Optional[ProcessFacts] = None,
) -> FastAPI:
    if settings is None:
        settings = Settings.from_env()
    if store is None:
        store = SessionStore(max_age=timedelta(seconds=settings.session_max_age))
    if facts is None:
        facts = ProcessFacts(resolve_manifest(settings.manifest_path))

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Socket Demo Server running on http://localhost:%d", settings.port)
        logger.info("Health check: http://localhost:%d/health", settings.port)
        logger.info("Ready for Socket Security scanning!")
        yield
        logger.info("Shutting down, dropping %d session(s)", len(store))

    app = FastAPI(
        title="Socket Security Demo",
        version=facts.version,
        redirect_slashes=False,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.store = store
    app.state.facts = facts

    app.add_middleware(
        PipelineMiddleware,
        stages=default_stages(
            store=store,
            signer=Signer(settings.session_secret),
            cookie_name=settings.session_cookie_name,
            public_dir=settings.public_dir,
            body_limit=settings.body_limit,
        ),
    )
    app.add_exception_handler(StarletteHTTPException, not_found_for_unmatched_method)

    app.include_router(home.router)
    app.include_router(health.router)
    app.include_router(info.router)

    return app


def run() -> None:
    """
    Console entry point. uvicorn exits non-zero if the port cannot be bound.

    To run under the uvicorn CLI instead: uvicorn main:create_app --factory
    """
    settings = Settings.from_env()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        application = create_app(settings)
    except ManifestError:
        logger.exception("Cannot start: dependency manifest unavailable")
        sys.exit(1)

    uvicorn.run(
        application,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
        server_header=False,
    )


if __name__ == "__main__":
    run()
