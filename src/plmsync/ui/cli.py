from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from signal import SIGINT, signal
from typing import TYPE_CHECKING, Final

from dotenv import load_dotenv

from plmsync.app import (
    handle_dependency_delivery,
    handle_material_event,
    handle_style_event,
    handle_tracking_event,
    initialize_database,
    run_masterdata_sync,
)
from plmsync.config import configure_logging

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping, Sequence
    from types import FrameType

    from plmsync.domain.model import DeliveryResult, EventResult

log = logging.getLogger(__name__)

type Handler = Callable[[Mapping[str, object]], EventResult | DeliveryResult]

HANDLERS: Final[dict[str, Handler]] = {
    "material": handle_material_event,
    "style": handle_style_event,
    "tracking": handle_tracking_event,
    "dependencies": handle_dependency_delivery,
}


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Synchronise BeProduct PLM data")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log at DEBUG level")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("init-db", help="Create or migrate the base schema")

    replay = subparsers.add_parser("replay", help="Process one stored event payload")
    replay.add_argument(
        "--kind",
        choices=sorted(HANDLERS),
        required=True,
        help="Which webhook the payload was sent to",
    )
    replay.add_argument("path", type=Path, help="JSON file holding the event payload")

    masterdata = subparsers.add_parser("masterdata", help="Sync masterdata enumerations")
    masterdata.add_argument(
        "--field",
        dest="fields",
        action="append",
        help="Masterdata field id to sync (repeatable, defaults to config)",
    )

    return parser.parse_args(list(argv))


def _load_payload(path: Path) -> dict[str, object]:
    try:
        document = json.loads(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise ValueError(f"Cannot read {path}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise ValueError(f"{path} is not valid JSON: {exc}") from exc
    if not isinstance(document, dict):
        raise ValueError(f"{path} must contain a JSON object")
    return document


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    configure_logging()
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    try:
        parsed_args = _parse_args(args_list)
        payload = _load_payload(parsed_args.path) if parsed_args.command == "replay" else None
    except ValueError:
        log.exception("CLI validation error")
        sys.exit(2)

    if parsed_args.verbose:
        configure_logging(level=logging.DEBUG, force=True)

    try:
        if parsed_args.command == "init-db":
            initialize_database()
            log.info("Database schema is up to date")
            ok = True
        elif parsed_args.command == "replay" and payload is not None:
            result = HANDLERS[parsed_args.kind](payload)
            print(json.dumps(result.to_payload(), default=str, indent=2))  # noqa: T201
            ok = result.ok
        elif parsed_args.command == "masterdata":
            masterdata = run_masterdata_sync(fields=parsed_args.fields)
            for field_id, outcome in masterdata.fields.items():
                log.info("%s: synced=%s errors=%s", field_id, outcome.synced, outcome.errors)
            ok = masterdata.ok
        else:
            raise ValueError(f"Unsupported command: {parsed_args.command}")  # noqa: TRY301
    except Exception:
        log.exception("Fatal error during sync")
        sys.exit(1)

    if not ok:
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
