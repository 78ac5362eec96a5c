"""Application entry point for the rollwatch automation engine."""

from __future__ import annotations

import argparse
import asyncio
import contextlib
import logging
import os
import signal
from dataclasses import dataclass
from logging.handlers import RotatingFileHandler
from typing import Optional

from art import tprint
from dotenv import load_dotenv

import settings
from adapters.discord_http import DiscordHttpClient
from adapters.json_preferences import JsonFilePersistence
from adapters.sqlite_storage import SQLiteStorage
from client import build_client, load_token
from core.engine import DecisionEngine, run_event_loop
from core.lookup import LookupCoordinator
from core.preferences import PreferenceStore
from core.scheduler import RollScheduler
from core.stats import Stats
from core.tracker import Tracker
from core.verifier import CharacterVerifier, WishlistVerifier
from frontend.wishlist_cli import run_wishlist_command

NAME = "ROLLWATCH"
FONT = "tarty-1"


def _print_banner() -> None:
    tprint(NAME, FONT, space=1)


class _RedactingFormatter(logging.Formatter):
    def __init__(self, secrets: list[str], fmt: str, datefmt: Optional[str] = None) -> None:
        super().__init__(fmt=fmt, datefmt=datefmt)
        self._secrets = [secret for secret in secrets if secret]

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        for secret in self._secrets:
            message = message.replace(secret, "***")
        return message


def _collect_redaction_values(config: dict) -> list[str]:
    redact_cfg = config.get("redact", {}) if config else {}
    if not redact_cfg.get("enabled", False):
        return []
    values = []
    for name in redact_cfg.get("patterns", []):
        value = os.getenv(name)
        if value:
            values.append(value)
    return sorted(set(values), key=len, reverse=True)


def _configure_logging(config: dict, project_root: str, console_allowed: bool = True) -> None:
    if not config.get("enabled", False):
        return

    load_dotenv()
    level_name = str(config.get("level", "INFO")).upper()
    level = getattr(logging, level_name, logging.INFO)

    fmt = "%(asctime)s %(levelname)s %(name)s: %(message)s"
    datefmt = "%Y-%m-%d %H:%M:%S"
    secrets = _collect_redaction_values(config)
    formatter = _RedactingFormatter(secrets, fmt=fmt, datefmt=datefmt)

    handlers: list[logging.Handler] = []

    # The dashboard owns the terminal, so console output is only used headless.
    if config.get("console", True) and console_allowed:
        console_handler = logging.StreamHandler()
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        handlers.append(console_handler)

    file_cfg = config.get("file", {})
    if file_cfg.get("enabled", False):
        path = file_cfg.get("path", "logs/rollwatch.log")
        if not os.path.isabs(path):
            path = os.path.join(project_root, path)
        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)

        max_bytes = int(file_cfg.get("max_bytes", 5 * 1024 * 1024))
        backup_count = int(file_cfg.get("backup_count", 5))
        file_handler = RotatingFileHandler(
            path,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    if not handlers:
        return

    logging.basicConfig(level=level, handlers=handlers)


@dataclass
class Runtime:
    """Long-lived collaborators shared by the tasks of one run."""

    storage: SQLiteStorage
    stats: Stats
    tracker: Tracker
    preferences: PreferenceStore
    http: DiscordHttpClient
    coordinator: LookupCoordinator
    engine: DecisionEngine
    scheduler: RollScheduler
    wishlist_verifier: Optional[WishlistVerifier]


def _build_runtime(token: str) -> Runtime:
    storage = SQLiteStorage(settings.DB_PATH)
    storage.init_db()
    stats = Stats(saved=storage.load_stats())

    tracker = Tracker(
        cooldown_seconds=settings.AUTOMATION.roll_cooldown_seconds,
        initial_budget=settings.AUTOMATION.initial_budget,
    )
    preferences = PreferenceStore(
        JsonFilePersistence(settings.WISHLIST_PATH),
        fuzzy_enabled=settings.WISHLIST.fuzzy_match,
        fuzzy_threshold=settings.WISHLIST.fuzzy_threshold,
        priority_verified=settings.WISHLIST.priority_verified,
    )
    preferences.load()

    http = DiscordHttpClient(token, bot_account=settings.BOT_ACCOUNT)
    coordinator = LookupCoordinator(http, timeout=settings.LOOKUP_TIMEOUT_SECONDS)
    engine = DecisionEngine(
        client=http,
        tracker=tracker,
        preferences=preferences,
        stats=stats,
        config=settings.ENGINE,
        coordinator=coordinator,
        stats_storage=storage,
    )
    scheduler = RollScheduler(
        client=http,
        tracker=tracker,
        stats=stats,
        config=settings.AUTOMATION,
        channels=settings.CHANNELS,
    )
    wishlist_verifier = None
    if settings.CHANNELS:
        wishlist_verifier = WishlistVerifier(
            CharacterVerifier(coordinator, settings.CHANNELS[0]),
            preferences,
        )
    return Runtime(
        storage=storage,
        stats=stats,
        tracker=tracker,
        preferences=preferences,
        http=http,
        coordinator=coordinator,
        engine=engine,
        scheduler=scheduler,
        wishlist_verifier=wishlist_verifier,
    )


async def _save_stats_periodically(runtime: Runtime, interval: int, shutdown: asyncio.Event) -> None:
    logger = logging.getLogger(__name__)
    while not shutdown.is_set():
        with contextlib.suppress(asyncio.TimeoutError):
            await asyncio.wait_for(shutdown.wait(), timeout=interval)
        try:
            runtime.storage.save_stats(runtime.stats.to_saved())
        except Exception:
            logger.exception("Failed to save stats")


async def _run_gateway(client, token: str, shutdown: asyncio.Event) -> None:
    logger = logging.getLogger(__name__)
    try:
        await client.start(token)
    except Exception:
        logger.exception("Discord gateway stopped")
    finally:
        shutdown.set()


async def _run_async(no_tui: bool) -> None:
    logger = logging.getLogger(__name__)
    token = load_token()
    runtime = _build_runtime(token)
    shutdown = asyncio.Event()
    queue: asyncio.Queue = asyncio.Queue()
    gateway = build_client(queue, runtime.stats)

    logger.info(
        "%s channel(s) configured, %s wishlist entries loaded",
        len(settings.CHANNELS),
        runtime.preferences.count(),
    )
    if not settings.CHANNELS:
        logger.warning("No channels configured; rolling is disabled")

    tasks = [
        asyncio.create_task(_run_gateway(gateway, token, shutdown), name="gateway"),
        asyncio.create_task(run_event_loop(runtime.engine, queue, shutdown), name="consumer"),
        asyncio.create_task(runtime.scheduler.run(shutdown), name="scheduler"),
        asyncio.create_task(
            _save_stats_periodically(runtime, settings.STATS_SAVE_INTERVAL_SECONDS, shutdown),
            name="stats-saver",
        ),
    ]

    try:
        if no_tui:
            loop = asyncio.get_running_loop()
            for sig in (signal.SIGINT, signal.SIGTERM):
                with contextlib.suppress(NotImplementedError):
                    loop.add_signal_handler(sig, shutdown.set)
            await shutdown.wait()
        else:
            from frontend.dashboard import DashboardApp

            dashboard = DashboardApp(
                stats=runtime.stats,
                tracker=runtime.tracker,
                preferences=runtime.preferences,
                coordinator=runtime.coordinator,
                verifier=runtime.wishlist_verifier,
                automation=settings.AUTOMATION,
                channels=settings.CHANNELS,
            )
            await dashboard.run_async()
    finally:
        shutdown.set()
        logger.info("Shutting down")
        await gateway.close()
        for task in tasks:
            if task.get_name() == "scheduler":
                task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        runtime.storage.save_stats(runtime.stats.to_saved())
        await runtime.http.aclose()


def _run(no_tui: bool) -> None:
    _print_banner()
    _configure_logging(settings.LOGGING or {}, settings.PROJECT_ROOT, console_allowed=no_tui)
    logging.getLogger(__name__).info("Starting rollwatch")
    asyncio.run(_run_async(no_tui))


def _setup() -> None:
    _print_banner()
    from frontend.app import ConfigPanelApp

    ConfigPanelApp().run()


def _wishlist(args: argparse.Namespace) -> int:
    store = PreferenceStore(
        JsonFilePersistence(settings.WISHLIST_PATH),
        fuzzy_enabled=settings.WISHLIST.fuzzy_match,
        fuzzy_threshold=settings.WISHLIST.fuzzy_threshold,
        priority_verified=settings.WISHLIST.priority_verified,
    )
    store.load()
    return run_wishlist_command(store, args)


def main(argv: Optional[list[str]] = None) -> None:
    parser = argparse.ArgumentParser(prog="rollwatch")
    subparsers = parser.add_subparsers(dest="command")

    run_parser = subparsers.add_parser("run", help="Start the automation engine")
    run_parser.add_argument("--no-tui", action="store_true", help="Run headless without the dashboard")
    subparsers.add_parser("config", help="Launch the config TUI")

    wishlist_parser = subparsers.add_parser("wishlist", help="Manage the wishlist file")
    wishlist_sub = wishlist_parser.add_subparsers(dest="wishlist_command")
    wishlist_sub.add_parser("list", help="List wishlist entries")
    add_parser = wishlist_sub.add_parser("add", help="Add a character (unverified)")
    add_parser.add_argument("name")
    add_parser.add_argument("--series", default=None)
    add_parser.add_argument("--priority", type=int, default=0)
    remove_parser = wishlist_sub.add_parser("remove", help="Remove a character")
    remove_parser.add_argument("name")
    export_parser = wishlist_sub.add_parser("export", help="Print or write the wishlist JSON")
    export_parser.add_argument("--output", default=None)
    import_parser = wishlist_sub.add_parser("import", help="Merge entries from a wishlist JSON file")
    import_parser.add_argument("input")

    args = parser.parse_args(argv)
    if args.command == "config":
        _setup()
        return
    if args.command == "wishlist":
        raise SystemExit(_wishlist(args))
    _run(no_tui=bool(getattr(args, "no_tui", False)))


if __name__ == "__main__":
    main()
