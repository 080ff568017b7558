"""Process entrypoint for Module Update Router startup orchestration."""

from __future__ import annotations

import os
import signal
import threading
from dataclasses import dataclass
from pathlib import Path
from time import sleep

import uvicorn
from fastapi import FastAPI

from packages.router_core.app import build_app
from packages.router_shared.config import RouterSettings, load_settings
from packages.router_shared.http import build_server
from packages.router_shared.logging import configure_logging, fields, get_logger, log_context
from resources.adapters.event_bus import EventMirrorPublisher, create_redis_client
from services.action.channel_router import DefaultChannelRouterService
from services.action.event_recorder import DefaultEventRecorderService
from services.state.event_retention import RetentionSweeper
from services.state.update_store import UpdateStore, open_update_store

CONFIG_FILE_ENV = "MUR_CONFIG_FILE"

_LOGGER = get_logger(__name__)
_RUNNING = True


def _handle_shutdown(_signum: int, _frame: object) -> None:
    """Mark process for graceful shutdown when receiving termination signals."""
    global _RUNNING
    _RUNNING = False


@dataclass
class RouterRuntime:
    """Everything the process owns between startup and shutdown."""

    settings: RouterSettings
    store: UpdateStore
    sweeper: RetentionSweeper
    publisher: EventMirrorPublisher | None
    app: FastAPI

    def start_background(self) -> None:
        """Start the retention sweeper and the optional event mirror."""
        self.sweeper.start()
        if self.publisher is not None:
            self.publisher.start()

    def close(self) -> None:
        """Stop background workers, then release the database."""
        self.sweeper.stop()
        if self.publisher is not None:
            self.publisher.stop()
        self.store.close()


def prepare_store(settings: RouterSettings) -> UpdateStore:
    """Open, migrate and optionally seed the database; failures propagate."""
    database = settings.database
    store = open_update_store(database)
    try:
        result = store.migrate(reset=database.reset)
        _LOGGER.info(
            "migrations complete",
            extra={"applied": result.applied, "reset": result.reset},
        )
        if database.seed_path is not None:
            store.seed(database.seed_path)
            _LOGGER.info("seed complete", extra={"seed_path": str(database.seed_path)})
    except Exception:
        store.close()
        raise
    return store


def build_runtime(settings: RouterSettings) -> RouterRuntime:
    """Wire store, services, workers and the HTTP app from one settings tree."""
    store = prepare_store(settings)

    publisher = None
    if settings.event_bus.enabled:
        publisher = EventMirrorPublisher(
            client=create_redis_client(settings.event_bus),
            settings=settings.event_bus,
        )

    app = build_app(
        settings=settings.http,
        channel_service=DefaultChannelRouterService(store=store),
        event_service=DefaultEventRecorderService(store=store, publisher=publisher),
    )
    return RouterRuntime(
        settings=settings,
        store=store,
        sweeper=RetentionSweeper(store=store, settings=settings.retention),
        publisher=publisher,
        app=app,
    )


def _start_http_runtime(
    runtime: RouterRuntime,
) -> tuple[uvicorn.Server, threading.Thread]:
    """Start uvicorn for the runtime app in a daemon thread."""
    http = runtime.settings.http
    server = build_server(
        runtime.app,
        host=http.host,
        port=http.port,
        log_level=runtime.settings.logging.level,
    )
    thread = threading.Thread(target=server.run, name="http", daemon=True)
    thread.start()
    with log_context({fields.ROUTINE: "app"}):
        _LOGGER.info(
            "started http listener",
            extra={"addr": f"{http.host}:{http.port}", "api_roots": http.api_roots()},
        )
    return server, thread


def serve(settings: RouterSettings) -> None:
    """Run the router until SIGINT/SIGTERM or until the HTTP thread exits."""
    global _RUNNING
    _RUNNING = True
    configure_logging(
        level=settings.logging.level,
        json_output=settings.logging.json_output,
        service=settings.logging.service,
        environment=settings.logging.environment,
    )

    runtime = build_runtime(settings)
    runtime.start_background()
    http_server, http_thread = _start_http_runtime(runtime)

    signal.signal(signal.SIGINT, _handle_shutdown)
    signal.signal(signal.SIGTERM, _handle_shutdown)
    try:
        while _RUNNING and http_thread.is_alive():
            sleep(1.0)
    finally:
        http_server.should_exit = True
        http_thread.join(timeout=5.0)
        runtime.close()
        _LOGGER.info("module update router stopped")


def main() -> None:
    """Load settings from env and the optional config file, then serve."""
    config_path = os.getenv(CONFIG_FILE_ENV, "").strip()
    settings = load_settings(config_path=Path(config_path) if config_path else None)
    serve(settings)


if __name__ == "__main__":
    main()
