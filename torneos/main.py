"""Composition root for the torneos service.

This module is the ONLY location that imports both core domain logic
and concrete adapter implementations. All wiring of dependencies
happens here, creating a clear entry point for the application.

Module Structure:
- Configuration loading via config module
- Adapter instantiation
- Core service initialization
- Dependency injection
- HTTP server start and shutdown
"""

import asyncio
import logging
import sys
from dataclasses import dataclass

from torneos.adapters.api.handlers import TorneoApiHandlers
from torneos.adapters.api.http_server import ApiHTTPServer
from torneos.adapters.store.memory import (
    InMemoryCategoriaStore,
    InMemoryTorneoStore,
    categorias_iniciales,
)
from torneos.adapters.store.sqlite import SQLiteTorneoStore
from torneos.config import Settings, load_settings
from torneos.core.ports import TorneoStorePort
from torneos.core.torneo_service import TorneoService


@dataclass
class Components:
    """Everything bootstrap wires together, exposed for tests."""

    torneo_store: TorneoStorePort
    categoria_store: InMemoryCategoriaStore
    service: TorneoService
    handlers: TorneoApiHandlers
    http_server: ApiHTTPServer


def configure_logging(log_level: str, log_format: str) -> None:
    """Configure application logging.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_format: Log format (json, text).
    """
    level = getattr(logging, log_level, logging.INFO)

    if log_format == "json":
        format_str = (
            '{"time": "%(asctime)s", "level": "%(levelname)s", '
            '"logger": "%(name)s", "message": "%(message)s"}'
        )
    else:
        format_str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    logging.basicConfig(
        level=level,
        format=format_str,
        handlers=[
            logging.StreamHandler(sys.stdout),
        ],
    )


def build_components(settings: Settings) -> Components:
    """Instantiate adapters and core services from settings.

    Raises:
        ValueError: If the HTTP auth configuration is inconsistent.
    """
    logger = logging.getLogger(__name__)

    categoria_store = InMemoryCategoriaStore(
        categorias_iniciales() if settings.seed_categorias else []
    )

    torneo_store: TorneoStorePort
    if settings.store_backend == "sqlite":
        torneo_store = SQLiteTorneoStore(db_path=settings.store_sqlite_path)
        logger.info(f"Torneo store initialized: {settings.store_sqlite_path}")
    else:
        torneo_store = InMemoryTorneoStore()
        logger.info("Torneo store initialized: in-memory")

    service = TorneoService(torneos=torneo_store, categorias=categoria_store)
    handlers = TorneoApiHandlers(
        service, default_organizador_id=settings.default_organizador_id
    )
    http_server = ApiHTTPServer(
        handlers,
        host=settings.http_host,
        port=settings.http_port,
        api_key=settings.api_key or None,
        require_auth=settings.require_auth,
    )

    return Components(
        torneo_store=torneo_store,
        categoria_store=categoria_store,
        service=service,
        handlers=handlers,
        http_server=http_server,
    )


async def bootstrap() -> None:
    """Load configuration, wire adapters, and serve the HTTP API.

    Steps:
    1. Load configuration from environment
    2. Configure logging
    3. Instantiate adapters and core services
    4. Start the HTTP server and run until cancelled

    Raises:
        SystemExit: On fatal configuration errors.
        asyncio.CancelledError: On graceful shutdown signal.
    """
    settings = load_settings()

    configure_logging(settings.log_level, settings.log_format)
    logger = logging.getLogger(__name__)
    logger.info(f"Loading torneos service (stage={settings.stage})...")

    try:
        components = build_components(settings)
    except ValueError as e:
        logger.error(f"Invalid configuration: {e}")
        sys.exit(1)

    await components.http_server.start()
    try:
        while True:
            await asyncio.sleep(1)
    finally:
        await components.http_server.stop()
        if isinstance(components.torneo_store, SQLiteTorneoStore):
            await components.torneo_store.close_pool()


def main() -> None:
    """Application entry point.

    Exit codes:
        0: Successful shutdown
        1: Fatal bootstrap or runtime error
        130: Interrupted by user (SIGINT/KeyboardInterrupt)
    """
    logger = logging.getLogger(__name__)
    try:
        asyncio.run(bootstrap())
    except KeyboardInterrupt:
        logger.warning("Shutdown requested by user (SIGINT)")
        sys.exit(130)
    except asyncio.CancelledError:
        logger.info("Graceful shutdown completed")
        sys.exit(0)
    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
