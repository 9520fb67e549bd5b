#!/usr/bin/env python3

# ruff: noqa: T201

from __future__ import annotations

import argparse
import logging
import sys
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from pledgesync.app import is_access_expired, link_patron, sync_patreon_pledges
from pledgesync.common.logging import configure_logging
from pledgesync.config import ConfigurationError, get_patreon_config

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Reconcile Patreon pledges into a local snapshot")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    commands = parser.add_subparsers(dest="command", required=True)

    pull = commands.add_parser("pull", help="Replace the snapshot with a full member listing")
    pull.add_argument(
        "--page-size",
        type=int,
        default=None,
        help="Members requested per listing page",
    )

    expired = commands.add_parser("expired", help="Report whether a user's access has lapsed")
    expired.add_argument("user_id", help="Local user id")

    link = commands.add_parser("link", help="Tie a Patreon patron id to a local user id")
    link.add_argument("patron_id", help="Patreon user id of the patron")
    link.add_argument("user_id", help="Local user id")
    return parser.parse_args(list(argv))


def _run_pull(args: argparse.Namespace) -> None:
    config = (
        get_patreon_config(page_size=args.page_size)
        if args.page_size is not None
        else get_patreon_config()
    )
    result = sync_patreon_pledges(config=config)
    print(f"Pulled {result.pages} page(s), {result.patrons} patron(s)")


def _run_expired(args: argparse.Namespace) -> None:
    expired, expiration = is_access_expired(args.user_id)
    if expiration is None:
        print(f"{args.user_id}: expired (no tracked expiration)")
    elif expired:
        print(f"{args.user_id}: expired since {expiration}")
    else:
        print(f"{args.user_id}: active until {expiration}")


def _run_link(args: argparse.Namespace) -> None:
    link_patron(args.patron_id, args.user_id)
    print(f"Linked patron {args.patron_id} to user {args.user_id}")


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    parsed_args = _parse_args(sys.argv[1:] if argv is None else argv)
    configure_logging(level=logging.DEBUG if parsed_args.verbose else logging.INFO)
    try:
        if parsed_args.command == "pull":
            _run_pull(parsed_args)
        elif parsed_args.command == "link":
            _run_link(parsed_args)
        else:
            _run_expired(parsed_args)
    except ConfigurationError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        sys.exit(2)
    except Exception as e:  # noqa: BLE001
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    print("\nClosed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
