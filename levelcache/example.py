"""A short demonstration: store one value and read it back."""

from __future__ import annotations

import argparse
import logging
import sys
import tempfile
from pathlib import Path

from levelcache.cache import CacheError, LevelCache


def main(argv: list[str] | None = None) -> int:
    """Store a greeting, read it back and print both steps."""
    parser = argparse.ArgumentParser(description="Store and retrieve one value.")
    parser.add_argument(
        "db_path",
        nargs="?",
        default=str(Path(tempfile.gettempdir()) / "my_project_db"),
        help="directory of the database",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO)

    try:
        cache = LevelCache(args.db_path, 10, 0, 0, logging.INFO)
    except CacheError:
        print("Failed to open database.", file=sys.stderr)
        return 1

    with cache:
        key = "greeting"
        value = "Hello from levelcache!"
        try:
            cache.put(key, value, 0)
        except CacheError:
            print("Failed to put value.", file=sys.stderr)
            return 1
        print(f"Stored: '{key}' -> '{value}'")

        retrieved = cache.get(key)
        if retrieved is not None:
            print(f"Retrieved: '{key}' -> '{retrieved}'")
        else:
            print(f"Key '{key}' not found.")
    return 0


if __name__ == "__main__":
    sys.exit(main())