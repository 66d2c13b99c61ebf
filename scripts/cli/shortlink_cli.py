#!/usr/bin/env python3
"""
Command-line interface for managing short links.

Usage:
    python shortlink_cli.py [--mappings-file PATH] add <url>
    python shortlink_cli.py [--mappings-file PATH] list
    python shortlink_cli.py [--mappings-file PATH] resolve <code>

The mapping file defaults to MAPPINGS_FILE from the environment / .env.
Run one `add` at a time; concurrent runs can overwrite each other.
"""

import argparse
import json
import sys
import os
from typing import List, Optional

# Add project root to path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '../..')))

from config import load_config
from reflector.common.validators import is_valid_url
from reflector.common.logging_config import setup_logging
from reflector.service import ShortLinkService
from reflector.shortlink import ExhaustionError, RedirectTarget, NotFound, short_path
from reflector.storage.base import StorageError
from reflector.storage.json_file import JSONFileMappingStore


class ShortLinkCLI:
    """Command-line interface for the short link table."""

    def __init__(self, mappings_file: str, max_attempts: int = 100, verbose: bool = False):
        """Initialize CLI."""
        # Logs go to stderr so stdout stays valid JSON
        self.logger = setup_logging(level="DEBUG" if verbose else "CRITICAL", stream=sys.stderr)
        self.store = JSONFileMappingStore(mappings_file, logger=self.logger)
        self.service = ShortLinkService(
            store=self.store,
            logger=self.logger,
            max_attempts=max_attempts,
        )

    def _fail(self, error: str) -> int:
        print(json.dumps({"success": False, "error": error}, indent=2), file=sys.stderr)
        return 1

    def add(self, url: str) -> int:
        """Allocate a code for a URL; only report it once it is saved."""
        is_valid, error = is_valid_url(url)
        if not is_valid:
            return self._fail(f"Invalid URL: {error}")

        try:
            link = self.service.create_short_link(url)
        except (ExhaustionError, StorageError) as e:
            return self._fail(str(e))

        print(json.dumps({
            "success": True,
            "short_code": link.code,
            "original_url": link.url,
            "short_path": short_path(link.code),
            "message": f"Added: {link.code} -> {link.url}",
        }, indent=2))
        return 0

    def list(self) -> int:
        """Print every short link."""
        try:
            links = self.service.list_links()
        except StorageError as e:
            return self._fail(str(e))

        print(json.dumps({
            "success": True,
            "count": len(links),
            "links": [link.to_dict() for link in links],
        }, indent=2))
        return 0

    def resolve(self, code: str) -> int:
        """Show where a code points."""
        try:
            result = self.service.resolve_path(short_path(code))
        except StorageError as e:
            return self._fail(str(e))

        if isinstance(result, RedirectTarget):
            print(json.dumps({
                "success": True,
                "short_code": code.lower(),
                "original_url": result.url,
            }, indent=2))
            return 0

        if isinstance(result, NotFound):
            return self._fail(f"Short link '{result.code}' not found")

        return self._fail(f"'{code}' is not a valid short code (1-4 hex digits)")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Manage the short link mapping set",
    )
    parser.add_argument("--mappings-file", help="Mapping set JSON file (default: MAPPINGS_FILE)")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", required=True)

    add_parser = subparsers.add_parser("add", help="Add a URL and print its short code")
    add_parser.add_argument("url", help="URL to shorten, e.g. https://www.example.com")

    subparsers.add_parser("list", help="List all short links")

    resolve_parser = subparsers.add_parser("resolve", help="Show the URL behind a short code")
    resolve_parser.add_argument("code", help="Short code (1-4 hex digits)")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)
    config = load_config()

    cli = ShortLinkCLI(
        mappings_file=args.mappings_file or config.mappings_file,
        max_attempts=config.max_allocation_attempts,
        verbose=args.verbose,
    )

    if args.command == "add":
        return cli.add(args.url)
    if args.command == "list":
        return cli.list()
    return cli.resolve(args.code)


if __name__ == "__main__":
    sys.exit(main())
