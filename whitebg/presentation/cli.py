from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Sequence

from whitebg.application.path_options import (
    ensure_input_exists,
    parse_size,
    parse_tolerance,
    resolve_output_path,
)
from whitebg.application.remove_background_use_case import (
    ProcessResult,
    RemoveBackgroundOptions,
    RemoveBackgroundUseCase,
)
from whitebg.config import APP_NAME, APP_VERSION, settings
from whitebg.domain.errors import InputValidationError, WhiteBgError
from whitebg.domain.white_threshold import WhiteThresholdRemover

logger = logging.getLogger("whitebg.cli")


class _ArgumentParser(argparse.ArgumentParser):
    # Usage errors exit through the same handler as every other failure.
    def error(self, message: str) -> None:  # type: ignore[override]
        raise InputValidationError(message)


def build_parser() -> argparse.ArgumentParser:
    parser = _ArgumentParser(
        prog=APP_NAME,
        description="Remove white background from PNG images and make it transparent",
    )
    parser.add_argument("input", help="input PNG file path")
    parser.add_argument("-o", "--output", metavar="FILE", help="output file path (default: adds _no_bg suffix)")
    parser.add_argument(
        "-t",
        "--tolerance",
        default=settings.default_tolerance,
        help="white detection tolerance (0-255)",
    )
    parser.add_argument(
        "-s",
        "--size",
        default="",
        metavar="WxH",
        help="resize output to specific size (e.g., 32x32, 64x64)",
    )
    parser.add_argument("--favicon", action="store_true", help="generate favicon sizes (16x16, 32x32, 48x48)")
    parser.add_argument("--version", action="version", version=APP_VERSION)
    return parser


def process_image(args: argparse.Namespace) -> ProcessResult:
    input_path = ensure_input_exists(args.input)
    tolerance = parse_tolerance(args.tolerance)
    size = parse_size(args.size)
    output_path = resolve_output_path(input_path, args.output)

    logger.info("Processing: %s", input_path)
    logger.info("Output: %s", output_path)
    logger.info("Tolerance: %d", tolerance)

    use_case = RemoveBackgroundUseCase(WhiteThresholdRemover(tolerance))
    return use_case.process_file(
        input_path,
        output_path,
        RemoveBackgroundOptions(size=size, favicon=args.favicon),
    )


def _configure_logging() -> None:
    level = logging.getLevelName(settings.log_level)
    if not isinstance(level, int):
        raise InputValidationError(f"Invalid WHITEBG_LOG_LEVEL: {settings.log_level}")
    logging.basicConfig(level=level, format="%(message)s")


def main(argv: Sequence[str] | None = None) -> int:
    try:
        _configure_logging()
        args = build_parser().parse_args(argv)
        process_image(args)
    except WhiteBgError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    except Exception as exc:  # noqa: BLE001
        logger.debug("unhandled failure", exc_info=True)
        print(f"Unhandled error: {exc}", file=sys.stderr)
        return 1
    return 0


def run() -> None:
    sys.exit(main())


if __name__ == "__main__":
    run()
