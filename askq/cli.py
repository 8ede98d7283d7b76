"""AskQ command line

Teacher-facing commands that replace the spreadsheet menu.

Usage:
    askq send-selected                 # email every ticked, complete row
    askq set-master-prompt             # interactive entry
    askq set-master-prompt --text "…"  # non-interactive
    askq process-row 7                 # re-run the submission pipeline for one row
    askq check-config                  # print configuration status (no secrets)
    askq serve --port 8000             # form-submit webhook + health endpoint
"""

from __future__ import annotations

import argparse
import sys
from collections.abc import Callable, Sequence

from askq.config import get_config_status
from askq.errors import ConfigurationError, SettingsRecordMissingError
from askq.observability.logging import configure_logging, get_logger
from askq.wiring import Services, build_services

logger = get_logger(__name__)

ServicesFactory = Callable[..., Services]


def _echo(message: str) -> None:
    print(message)


def cmd_send_selected(services: Services, args: argparse.Namespace) -> int:
    summary = services.dispatcher.send_selected()
    return 1 if summary.error else 0


def cmd_set_master_prompt(services: Services, args: argparse.Namespace) -> int:
    text = args.text
    if text is None:
        try:
            text = input("Enter the master prompt: ")
        except EOFError:
            text = ""
    if not text.strip():
        _echo("No master prompt entered; nothing changed.")
        return 1

    try:
        services.provider.set_master_prompt(text)
    except SettingsRecordMissingError as e:
        _echo(f"Error: {e}. Create it before setting the master prompt.")
        return 1

    _echo("Master prompt updated.")
    return 0


def cmd_process_row(services: Services, args: argparse.Namespace) -> int:
    if args.row < 2:
        _echo("Row must be 2 or greater (row 1 is the header).")
        return 2
    outcome = services.processor.process(args.row)
    if outcome.aborted:
        _echo(f"Row {args.row} not processed: {outcome.error}")
        return 1
    _echo(f"Row {args.row}: {outcome.status.value}")
    return 0 if not outcome.status.is_error else 1


def cmd_check_config(services: Services, args: argparse.Namespace) -> int:
    status = get_config_status(services.config, services.provider.api_key_present())
    width = max(len(key) for key in status)
    for key, value in status.items():
        _echo(f"{key.ljust(width)}  {value}")
    return 0


def cmd_serve(services: Services, args: argparse.Namespace) -> int:
    import uvicorn

    from askq.api.app import create_app

    uvicorn.run(create_app(services), host=args.host, port=args.port)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="askq", description="Classroom AI prompt relay")
    parser.add_argument("--log-level", default=None, help="Override ASKQ_LOG_LEVEL")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("send-selected", help="Send Selected Answers")
    p.set_defaults(handler=cmd_send_selected)

    p = sub.add_parser("set-master-prompt", help="Set Master Prompt")
    p.add_argument("--text", default=None, help="Prompt text (omit to be asked)")
    p.set_defaults(handler=cmd_set_master_prompt)

    p = sub.add_parser("process-row", help="Run the submission pipeline for one row")
    p.add_argument("row", type=int, help="1-based sheet row number (header is row 1)")
    p.set_defaults(handler=cmd_process_row)

    p = sub.add_parser("check-config", help="Show configuration status")
    p.set_defaults(handler=cmd_check_config)

    p = sub.add_parser("serve", help="Run the HTTP trigger surface")
    p.add_argument("--host", default="0.0.0.0")
    p.add_argument("--port", type=int, default=8000)
    p.set_defaults(handler=cmd_serve)

    return parser


def main(argv: Sequence[str] | None = None, services_factory: ServicesFactory = build_services) -> int:
    args = build_parser().parse_args(argv)
    if args.log_level:
        configure_logging(args.log_level)

    try:
        services = services_factory(user_notice=_echo)
    except ConfigurationError as e:
        _echo(f"Configuration error: {e}")
        return 2

    return args.handler(services, args)


if __name__ == "__main__":
    sys.exit(main())
