"""`rollwatch wishlist` subcommands over a loaded PreferenceStore."""

from __future__ import annotations

import argparse
import asyncio
import logging
from typing import Callable

from adapters.activity_formatting import format_preference
from core.models import PreferenceEntry
from core.preferences import PreferenceStore, PreferenceStoreError

LOGGER = logging.getLogger(__name__)


def run_wishlist_command(
    store: PreferenceStore,
    args: argparse.Namespace,
    out: Callable[[str], None] = print,
) -> int:
    """Run one wishlist action and return the process exit code."""

    action = args.wishlist_command or "list"
    try:
        if action == "list":
            entries = store.list_all()
            if not entries:
                out("Wishlist is empty.")
            for index, entry in enumerate(entries, start=1):
                out(f"{index}. {format_preference(entry)}")
        elif action == "add":
            entry = PreferenceEntry(name=args.name, series=args.series, priority=args.priority)
            added = asyncio.run(store.add(entry))
            out(f"Added {args.name}." if added else f"{args.name} is already in the wishlist.")
        elif action == "remove":
            removed = asyncio.run(store.remove(args.name))
            out(f"Removed {args.name}." if removed else f"{args.name} is not in the wishlist.")
        elif action == "export":
            document = store.export()
            if args.output:
                with open(args.output, "w", encoding="utf-8") as handle:
                    handle.write(document)
                out(f"Exported {store.count()} characters to {args.output}")
            else:
                out(document)
        elif action == "import":
            with open(args.input, "r", encoding="utf-8") as handle:
                added = asyncio.run(store.import_document(handle.read()))
            out(f"Imported {added} characters.")
    except PreferenceStoreError as exc:
        out(f"Error: {exc}")
        return 1
    except (OSError, ValueError, KeyError, TypeError) as exc:
        LOGGER.debug("Wishlist %s failed", action, exc_info=True)
        out(f"Error: {action} failed: {exc}")
        return 1
    return 0
