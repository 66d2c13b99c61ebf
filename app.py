#!/usr/bin/env python3
"""
Main entry point for the request reflector service.

Usage:
    python app.py

Environment variables:
    MAPPINGS_FILE - JSON file with the short link mapping set
    BASE_URL - Base URL for reporting short links
    ENABLE_ADMIN_API - Set to '1' to expose /api/links (unauthenticated)
    GEO_LOOKUP_URL / ASN_LOOKUP_URL - Upstream lookup URL templates
    HOST / PORT - Address to listen on
    WORKERS - Number of uvicorn worker processes (default 1)
    LOG_LEVEL - Logging level
"""

import signal
import sys
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from config import Config, load_config
from reflector.lookup import IPLookupClient
from reflector.service import ShortLinkService
from reflector.storage.json_file import JSONFileMappingStore
from reflector.common.logging_config import setup_logging
from web_app import create_app


def build_service(config: Config, logger) -> ShortLinkService:
    """Create the short link service over the configured mapping file."""
    store = JSONFileMappingStore(config.mappings_file, logger=logger)
    return ShortLinkService(
        store=store,
        logger=logger,
        max_attempts=config.max_allocation_attempts,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup and shutdown."""
    config = app.state.config
    logger = app.state.logger

    logger.info("Starting request reflector...")

    service = build_service(config, logger)
    links = service.health_check()
    logger.info(f"Serving {links['mappings']} short links from {config.mappings_file}")

    lookup = IPLookupClient(
        geo_url=config.geo_lookup_url,
        asn_url=config.asn_lookup_url,
        timeout_seconds=config.lookup_timeout_seconds,
        max_retries=config.lookup_max_retries,
        logger=logger,
    )

    app.state.service = service
    app.state.lookup = lookup

    logger.info("Service started successfully")

    yield

    logger.info("Shutting down request reflector...")
    await lookup.close()
    logger.info("Service stopped")


def main():
    """Main entry point."""
    config = load_config()

    logger = setup_logging(
        level=config.log_level,
        log_file=config.log_file,
        json_format=config.log_json,
    )

    logger.info("Request Reflector")
    logger.info(f"Configuration: {config.model_dump()}")

    # Service and lookup client are created in lifespan
    app = create_app(
        service_instance=None,
        lookup_instance=None,
        config=config,
    )
    app.state.logger = logger
    app.router.lifespan_context = lifespan

    uvicorn_config = uvicorn.Config(
        app,
        host=config.host,
        port=config.port,
        workers=config.workers,
        log_level=config.log_level.lower(),
        access_log=False,
    )

    server = uvicorn.Server(uvicorn_config)

    def handle_signal(signum, frame):
        logger.info(f"Received signal {signum}, initiating graceful shutdown...")
        server.should_exit = True

    signal.signal(signal.SIGINT, handle_signal)
    signal.signal(signal.SIGTERM, handle_signal)

    try:
        logger.info(f"Starting server on {config.host}:{config.port}")
        server.run()
    except Exception as e:
        logger.error(f"Server error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
