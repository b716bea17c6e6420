"""CLI entry point for pdfsight."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import TYPE_CHECKING

from pydantic import ValidationError

from pdfsight import __version__, logger
from pdfsight.async_runner import run_async
from pdfsight.dependencies import ensure_cli_dependencies_for_fetch, ensure_cli_dependencies_for_serve
from pdfsight.exceptions import DependencyError, PackageError
from pdfsight.logging import configure_logging
from pdfsight.settings import MCP_TRANSPORTS, get_settings
from pdfsight.typing.enums import ProcessingMode
from pdfsight.typing.models import FetchAndParseRequest

if TYPE_CHECKING:
    from pdfsight.settings import Settings


def _pages_from_cli(value: str) -> list[int]:
    """Parse a `--pages` value such as `1,3,5`.

    Args:
        value (str): Comma-separated page numbers.

    Raises:
        argparse.ArgumentTypeError: If an entry is not a positive integer.

    Returns:
        list[int]: Page numbers in the given order.
    """
    pages: list[int] = []
    for raw in value.split(","):
        entry = raw.strip()
        if not entry:
            continue
        if not entry.isdigit() or int(entry) < 1:
            raise argparse.ArgumentTypeError(f"invalid page number: {entry!r}")  # noqa: TRY003
        pages.append(int(entry))
    return pages


def _mode_from_cli(value: str) -> ProcessingMode:
    try:
        return ProcessingMode.from_str(value)  # type: ignore[return-value]
    except ValueError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from exc


def build_parser() -> argparse.ArgumentParser:
    """Create the command-line parser.

    Returns:
        argparse.ArgumentParser: The configured argument parser.
    """
    parser = argparse.ArgumentParser(prog="pdfsight")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    subparsers = parser.add_subparsers(dest="command")

    serve_parser = subparsers.add_parser("serve", help="Run the MCP server")
    serve_parser.add_argument("--transport", choices=MCP_TRANSPORTS, default=None)

    fetch_parser = subparsers.add_parser("fetch", help="Fetch a PDF and print its markdown report")
    fetch_parser.add_argument("--url", required=True)
    fetch_parser.add_argument("--mode", type=_mode_from_cli, default=ProcessingMode.AUTO)
    fetch_parser.add_argument("--dpi", type=int, default=None)
    fetch_parser.add_argument("--max-pages", type=int, default=None, dest="max_pages")
    fetch_parser.add_argument("--pages", type=_pages_from_cli, default=None)
    fetch_parser.add_argument("--output", type=Path, default=None, dest="output_path")

    return parser


def _build_fetch_request(args: argparse.Namespace, settings: Settings) -> FetchAndParseRequest:
    """Build a fetch request from CLI arguments.

    Args:
        args (argparse.Namespace): Parsed CLI args.
        settings (Settings): Runtime settings providing defaults.

    Returns:
        FetchAndParseRequest: Request object.
    """
    return FetchAndParseRequest(
        url=args.url,
        mode=args.mode,
        dpi=args.dpi or settings.default_dpi,
        max_pages=args.max_pages or settings.default_max_pages,
        pages=args.pages,
    )


async def _fetch(request: FetchAndParseRequest, settings: Settings) -> str:
    from pdfsight.dispatcher import fetch_and_process  # noqa: PLC0415

    try:
        return await fetch_and_process(request, settings=settings)
    finally:
        await settings.aclose_httpx_clients()


def _write_report(report: str, output_path: Path | None) -> None:
    if output_path is None:
        sys.stdout.write(report)
        if not report.endswith("\n"):
            sys.stdout.write("\n")
        return
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(report, encoding="utf-8")
    logger.info("Report written", extra={"output_path": str(output_path)})


def _run_fetch(args: argparse.Namespace, settings: Settings) -> int:
    try:
        ensure_cli_dependencies_for_fetch()
        request = _build_fetch_request(args, settings)
        report = run_async(_fetch(request, settings))
    except ValidationError as exc:
        logger.error("Invalid fetch options", extra={"errors": exc.errors(include_url=False)})
        return 2
    except PackageError:
        logger.exception("PDF processing failed")
        return 1
    except KeyboardInterrupt:
        logger.info("PDF processing aborted by user")
        return 130
    except Exception:
        logger.exception("Unexpected error during PDF processing")
        return 1

    _write_report(report, args.output_path)
    return 0


def _run_serve(args: argparse.Namespace, settings: Settings) -> int:
    try:
        ensure_cli_dependencies_for_serve()
    except DependencyError:
        logger.exception("Cannot start MCP server")
        return 1
    from pdfsight.server import run_server  # noqa: PLC0415

    try:
        run_server(settings, transport=args.transport)
    except KeyboardInterrupt:
        logger.info("MCP server stopped by user")
        return 130
    return 0


def main() -> int:
    """Run the CLI.

    Returns:
        int: Exit code (0 success, 1 failure, 2 invalid options, 130 interrupted).
    """
    settings = get_settings()
    configure_logging(settings=settings)

    parser = build_parser()
    args = parser.parse_args()

    if args.command == "fetch":
        return _run_fetch(args, settings)
    if args.command == "serve":
        return _run_serve(args, settings)

    parser.print_help()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
