"""Main entry point for the vacancy bot."""

from dotenv import load_dotenv
load_dotenv()

import argparse
import signal
import sys
import threading
import time
from pathlib import Path
from typing import List, Mapping, Optional

from vacancy_bot.adapters.base import SourceClient
from vacancy_bot.adapters.factory import build_source_clients
from vacancy_bot.channel.dispatcher import ChatDispatcher
from vacancy_bot.channel.telegram import TelegramChannel
from vacancy_bot.config.environment import EnvironmentConfig
from vacancy_bot.config.exceptions import ConfigurationError
from vacancy_bot.config.loader import load_config
from vacancy_bot.config.models import AppConfig
from vacancy_bot.dialog.machine import DialogEngine
from vacancy_bot.dialog.service import BotService
from vacancy_bot.domain.models import Source
from vacancy_bot.formatting.renderer import MessageRenderer
from vacancy_bot.logging import get_logger
from vacancy_bot.logging.config import configure_logging
from vacancy_bot.pipeline.runner import SearchPipeline
from vacancy_bot.store.filter_store import FilterStore
from vacancy_bot.store.session_store import DialogSessionStore

logger = get_logger(__name__, component="cli")


def resolve_log_level(
    app_config: AppConfig, env_config: EnvironmentConfig, log_level_override: Optional[str]
) -> str:
    """Log level priority: CLI > LOG_LEVEL > config file."""
    if log_level_override:
        return log_level_override
    if env_config.log_level:
        return env_config.log_level
    return app_config.logging.level


def build_pipeline(app_config: AppConfig, clients: Mapping[Source, SourceClient]) -> SearchPipeline:
    return SearchPipeline(clients=clients, app_config=app_config)


def build_engine(
    app_config: AppConfig, pipeline: SearchPipeline, filter_store: FilterStore
) -> DialogEngine:
    return DialogEngine(
        filter_store=filter_store,
        session_store=DialogSessionStore(),
        search=pipeline.run,
        renderer=MessageRenderer(),
        available_sources=app_config.sources.enabled,
    )


def run_search_once(chat_id: int, pipeline: SearchPipeline, filter_store: FilterStore) -> List[str]:
    """Run one search for the chat's stored filter and print the messages."""
    result = pipeline.run(filter_store.get(chat_id))
    rendered = MessageRenderer().render_results(result)
    for message in rendered:
        print(message)
    return rendered


def run_bot(
    app_config: AppConfig,
    env_config: EnvironmentConfig,
    engine: DialogEngine,
    stop_event: threading.Event,
) -> None:
    """Long-poll Telegram and dispatch messages until ``stop_event`` is set."""
    channel = TelegramChannel(
        token=env_config.telegram_token,
        api_url=app_config.telegram.api_url,
        poll_timeout=app_config.telegram.poll_timeout,
        parse_mode=app_config.telegram.parse_mode,
        request_timeout=app_config.advanced.http_request_timeout,
        connection_pool_size=app_config.telegram.workers,
    )
    service = BotService(engine=engine, channel=channel)
    dispatcher = ChatDispatcher(service.handle_message, workers=app_config.telegram.workers)

    try:
        channel.poll(dispatcher.submit, stop_event)
    finally:
        dispatcher.shutdown(wait=True)
        channel.close()


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point for the vacancy bot.

    Returns:
        Exit code (0 for success, non-zero for failure).
    """
    start_time = time.time()
    parser = argparse.ArgumentParser(
        description="Vacancy bot - job posting aggregator with per-user filters over Telegram"
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to configuration file (default: config.yaml if present)",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Log level (overrides config and environment)",
    )
    parser.add_argument(
        "--search-once",
        type=int,
        metavar="CHAT_ID",
        default=None,
        help="Run one search with the stored filter of CHAT_ID, print the results and exit",
    )

    args = parser.parse_args(argv)
    search_once = args.search_once is not None

    try:
        app_config, env_config = load_config(args.config, require_token=not search_once)

        log_level = resolve_log_level(app_config, env_config, args.log_level)
        configure_logging(
            level=log_level,
            format_type=app_config.logging.format,
            environment=env_config.environment,
        )

        logger.info(
            "Vacancy bot starting",
            extra={
                "event": "service.starting",
                "config_path": str(args.config) if args.config else None,
                "log_level": log_level,
                "search_once": search_once,
            },
        )

        filter_store = FilterStore(app_config.storage.filters_path)
        clients = build_source_clients(app_config)
        pipeline = build_pipeline(app_config, clients)

        logger.info(
            "Configuration loaded",
            extra={
                "event": "config.loaded",
                "enabled_sources": [Source(s).value for s in app_config.sources.enabled],
                "active_clients": sorted(s.value for s in clients),
                "stored_filters": len(filter_store),
                "log_format": app_config.logging.format,
            },
        )

        try:
            if search_once:
                run_search_once(args.search_once, pipeline, filter_store)
                return 0

            stop_event = threading.Event()

            def signal_handler(signum, frame):
                logger.info(
                    f"Received signal {signum}, shutting down",
                    extra={"event": "service.signal_received", "signal": signum},
                )
                stop_event.set()

            signal.signal(signal.SIGINT, signal_handler)
            signal.signal(signal.SIGTERM, signal_handler)

            engine = build_engine(app_config, pipeline, filter_store)
            run_bot(app_config, env_config, engine, stop_event)
            return 0
        finally:
            for client in clients.values():
                client.close()
            logger.info(
                "Vacancy bot stopped",
                extra={
                    "event": "service.stopping",
                    "uptime_seconds": round(time.time() - start_time, 2),
                },
            )

    except ConfigurationError as e:
        print(f"Configuration Error: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\nShutdown requested by user", file=sys.stderr)
        return 0
    except Exception as e:
        print(f"Fatal error: {e}", file=sys.stderr)
        logger.critical(
            "Fatal error",
            extra={
                "event": "service.failed",
                "error_type": type(e).__name__,
                "error": str(e),
            },
            exc_info=True,
        )
        return 1


if __name__ == "__main__":
    sys.exit(main())
