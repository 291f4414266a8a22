#!/usr/bin/env python3
"""Manage the database URL stored in the OS keychain.

Settings read ``DATABASE_URL`` from the keychain before the environment,
so a deployment can keep its database password out of ``.env``.

Usage::

    cd backend
    python -m scripts.database_credentials set      # prompts for the URL
    python -m scripts.database_credentials status
    python -m scripts.database_credentials clear
"""

import argparse
import getpass
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from sqlalchemy.engine import make_url  # noqa: E402
from sqlalchemy.exc import ArgumentError  # noqa: E402

from services.credential_manager import (  # noqa: E402
    delete_credential,
    get_credential,
    set_credential,
)

KEY = "DATABASE_URL"


def masked_url(url: str) -> str:
    """Render a database URL with its password hidden."""
    return make_url(url).render_as_string(hide_password=True)


def cmd_set(url: str | None = None) -> int:
    """Validate and store the database URL. Returns a process exit code."""
    if url is None:
        url = getpass.getpass("Database URL (input hidden): ").strip()
    try:
        display = masked_url(url)
    except ArgumentError:
        print("ERROR: Not a valid SQLAlchemy database URL.")
        return 1
    if not set_credential(KEY, url):
        print("ERROR: Could not store the database URL in the keychain.")
        return 1
    print(f"Stored {display}")
    return 0


def cmd_status() -> int:
    """Print whether a database URL is stored."""
    url = get_credential(KEY)
    if url is None:
        print("No database URL stored in the keychain.")
    else:
        print(f"Keychain database URL: {masked_url(url)}")
    return 0


def cmd_clear() -> int:
    """Remove the stored database URL."""
    if delete_credential(KEY):
        print("Removed database URL from the keychain.")
    else:
        print("No database URL was stored.")
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    sub = parser.add_subparsers(dest="command", required=True)
    set_parser = sub.add_parser("set", help="store the database URL")
    set_parser.add_argument("--url", help="URL to store (prompted if omitted)")
    sub.add_parser("status", help="show the stored URL with its password hidden")
    sub.add_parser("clear", help="remove the stored URL")
    args = parser.parse_args(argv)

    if args.command == "set":
        return cmd_set(args.url)
    if args.command == "status":
        return cmd_status()
    return cmd_clear()


if __name__ == "__main__":
    sys.exit(main())
