from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from catalogsync.app import run_import, show_mapping
from catalogsync.config import configure_logging
from catalogsync.ui.server import serve

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

log = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Synchronise inventory datasets to Shopify")
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log per-record details",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    import_cmd = subparsers.add_parser("import", help="Import one crawler dataset")
    import_cmd.add_argument("dataset_id", type=str, help="Apify dataset id")

    mapping = subparsers.add_parser("mapping", help="Inspect stored identity mappings")
    mapping_sub = mapping.add_subparsers(dest="mapping_command", required=True)
    mapping_show = mapping_sub.add_parser("show", help="Show the remote ids for a key")
    mapping_show.add_argument("key", type=str, help="Identity key (stock id)")

    subparsers.add_parser("serve", help="Run the HTTP import trigger")

    return parser.parse_args(list(argv))


def _run(parsed_args: argparse.Namespace) -> None:
    if parsed_args.command == "import":
        dataset_id = parsed_args.dataset_id.strip()
        if not dataset_id:
            raise ValueError("Dataset id must not be empty")
        report = asyncio.run(run_import(dataset_id))
        for failure in report.result.failures:
            log.warning("Failed %s: %s", failure.identity_key, failure.reason)
    elif parsed_args.command == "mapping" and parsed_args.mapping_command == "show":
        ids = show_mapping(parsed_args.key)
        if ids is None:
            log.info("No mapping stored for %s", parsed_args.key)
        else:
            log.info(
                "%s -> product %s / variant %s",
                parsed_args.key,
                ids.product_id,
                ids.variant_id,
            )
    elif parsed_args.command == "serve":
        serve()
    else:
        raise ValueError(f"Unsupported command: {parsed_args.command}")


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args = _parse_args(args_list)
    configure_logging(level=logging.DEBUG if parsed_args.verbose else logging.INFO)

    try:
        _run(parsed_args)
    except ValueError:
        log.exception("CLI validation error")
        sys.exit(2)
    except Exception:
        log.exception("Fatal error during import")
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    """Console script entry point."""
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
