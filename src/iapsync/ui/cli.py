from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from iapsync.app import restore_identity_from_record, show_identity
from iapsync.config import configure_logging

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

log = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Manage the subscription subscriber identity")
    subparsers = parser.add_subparsers(dest="command", required=True)

    identity = subparsers.add_parser("identity", help="Subscriber identity commands")
    identity_sub = identity.add_subparsers(dest="identity_command", required=True)
    identity_sub.add_parser("show", help="Print the persisted identity as a JSON record")
    restore = identity_sub.add_parser(
        "restore",
        help="Overwrite the persisted identity with a record exported elsewhere",
    )
    restore.add_argument(
        "--file",
        type=Path,
        required=True,
        help="Path to a JSON identity record ('-' reads stdin)",
    )

    return parser.parse_args(list(argv))


def _load_record(path: Path) -> dict[str, object]:
    raw = sys.stdin.read() if str(path) == "-" else path.read_text(encoding="utf-8")
    try:
        payload = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ValueError(f"Identity record is not valid JSON: {exc.msg}") from exc
    if not isinstance(payload, dict):
        raise ValueError("Identity record must be a JSON object")
    return payload


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    configure_logging()
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args = _parse_args(args_list)

    try:
        if parsed_args.command == "identity" and parsed_args.identity_command == "show":
            record = show_identity()
            if record is None:
                log.info("No subscriber identity persisted")
                return
            print(record.model_dump_json(by_alias=True, exclude_none=True))  # noqa: T201
        elif parsed_args.command == "identity" and parsed_args.identity_command == "restore":
            identity = restore_identity_from_record(_load_record(parsed_args.file))
            log.info("Restored subscriber identity %s", identity.redacted_id)
        else:
            raise ValueError(f"Unsupported command: {parsed_args.command}")  # noqa: TRY301

    except ValueError:
        log.exception("Invalid input")
        sys.exit(2)
    except Exception:
        log.exception("Fatal error")
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
