"""
Routine watcher CLI entry point.

Usage:
    python -m squad_control_tower.watcher [--skip-seed]

Environment:
    STORE_URL     Routine store base URL
    STORE_TOKEN   Bearer token for the store
    AGENCY_URL    Agency gateway base URL
"""
from __future__ import annotations

import argparse
import sys

from .loop import run_watcher


def main() -> int:
    """Main entry point for watcher CLI."""
    parser = argparse.ArgumentParser(
        description="Routine watcher - triggers due routines",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    # Run against a local store
    STORE_URL=http://localhost:8000 STORE_TOKEN=dev AGENCY_URL=http://localhost:18789 \\
        python -m squad_control_tower.watcher

    # Do not create the default routines on an empty store
    python -m squad_control_tower.watcher --skip-seed
        """,
    )
    parser.add_argument(
        "--skip-seed",
        action="store_true",
        help="Do not seed default routines when the store is empty",
    )

    args = parser.parse_args()

    try:
        run_watcher(skip_seed=args.skip_seed)
        return 0
    except KeyboardInterrupt:
        print("\nWatcher stopped by user")
        return 0


if __name__ == "__main__":
    sys.exit(main())
