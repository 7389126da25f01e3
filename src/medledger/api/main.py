"""FastAPI application factory for the medledger API."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from pathlib import Path

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .. import __version__
from ..clock import SystemClock
from ..ids import IdGenerator, SecureRandomSource, SeededRandomSource
from ..service import init_patient_service
from ..store import init_store
from .config import APIConfig, get_config
from .routers import health_router, operations_router, patients_router

load_dotenv()

logger = logging.getLogger(__name__)


def init_services(config: APIConfig) -> None:
    """Build the global store and patient service from *config*."""
    store = init_store(
        data_dir=Path(config.data_dir) if config.data_dir else None,
        memory_id=config.memory_id,
        max_key_size=config.max_key_size,
        max_value_size=config.max_value_size,
    )
    if config.random_seed is not None:
        logger.info("Using seeded id source (seed=%d)", config.random_seed)
        source = SeededRandomSource(config.random_seed)
    else:
        source = SecureRandomSource()
    init_patient_service(store, id_generator=IdGenerator(source), clock=SystemClock())
    logger.info(
        "Patient store ready: %d patient(s), %s",
        len(store),
        f"persisted under {config.data_dir}" if config.data_dir else "in-memory",
    )


def create_app(config: APIConfig | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        config: Optional configuration. If None, loads from environment.

    Returns:
        Configured FastAPI application
    """
    if config is None:
        config = get_config()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        init_services(config)
        yield
        logger.info("Shutting down...")

    app = FastAPI(
        title="medledger API",
        description="Hospital patient records with nested medical records",
        version=__version__,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_credentials=config.cors_allow_credentials,
        allow_methods=config.cors_allow_methods,
        allow_headers=config.cors_allow_headers,
    )

    app.include_router(health_router, prefix="/api")
    app.include_router(operations_router, prefix="/api")
    app.include_router(patients_router, prefix="/api")

    return app


# Default app instance for uvicorn
app = create_app()


def main():
    """Entry point for the medledger-serve command."""
    import uvicorn

    config = get_config()
    logging.basicConfig(
        level=logging.DEBUG if config.debug else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run(
        "medledger.api.main:app",
        host=config.host,
        port=config.port,
        reload=config.debug,
    )


if __name__ == "__main__":
    main()
