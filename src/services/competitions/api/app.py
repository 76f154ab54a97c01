"""FastAPI application factory for the competition mentor."""
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from src.shared.db import dispose_engine, init_models
from src.shared.exceptions import MentorError
from src.shared.utils.logging import configure_logging
from src.services.competitions import __version__
from src.services.competitions.api.router import (
    chat_router,
    competitions_router,
    demo_router,
    health_router,
    users_router,
)
from src.services.competitions.config import get_config
from src.services.competitions.services.factory import MentorServiceFactory, MentorServices


logger = logging.getLogger(__name__)


async def mentor_error_handler(request: Request, exc: MentorError) -> JSONResponse:
    status_code = getattr(exc, "http_status", 500)
    if status_code >= 500:
        logger.error(
            f"{request.method} {request.url.path} failed: {exc}",
            extra={"error_code": exc.error_code, "status_code": status_code},
        )
    return JSONResponse(content=exc.to_dict(), status_code=status_code)


def create_app(services: Optional[MentorServices] = None) -> FastAPI:
    """Create the application.

    Args:
        services: Prebuilt service graph; when omitted the database-backed
            graph is built at startup and its tables are created.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        owns_services = services is None
        if owns_services:
            config = get_config()
            configure_logging(config.service_name, config.log_level, config.log_file)
            app.state.services = MentorServiceFactory.create_full(config)
            await init_models()
        else:
            app.state.services = services

        logger.info("Mentor API started")
        try:
            yield
        finally:
            await app.state.services.close()
            if owns_services:
                await dispose_engine()
            logger.info("Mentor API stopped")

    app = FastAPI(title="Kaggle Mentor", version=__version__, lifespan=lifespan)
    app.add_exception_handler(MentorError, mentor_error_handler)
    app.include_router(competitions_router)
    app.include_router(chat_router)
    app.include_router(users_router)
    app.include_router(demo_router)
    app.include_router(health_router)
    return app


def main() -> None:
    """Run the API server."""
    import uvicorn

    config = get_config()
    uvicorn.run(create_app(), host=config.api_host, port=config.api_port)
