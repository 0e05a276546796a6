from __future__ import annotations

import re
from pathlib import Path

from whitebg.domain.errors import InputValidationError
from whitebg.infrastructure.pillow_codec import SIZE_FORMAT_MESSAGE, validate_size

TOLERANCE_MESSAGE = "Tolerance must be a number between 0 and 255"
OUTPUT_SUFFIX = "_no_bg"

_SIZE_PATTERN = re.compile(r"^\s*(\d+)\s*[xX]\s*(\d+)\s*$")


def ensure_input_exists(input_path: str | Path) -> Path:
    path = Path(input_path)
    if not path.is_file():
        raise InputValidationError(f"Input file not found: {input_path}")
    return path


def default_output_path(input_path: str | Path) -> Path:
    path = Path(input_path)
    return path.with_name(f"{path.stem}{OUTPUT_SUFFIX}{path.suffix}")


def resolve_output_path(input_path: str | Path, output: str | Path | None) -> Path:
    if output:
        return Path(output)
    return default_output_path(input_path)


def parse_tolerance(value: str | int) -> int:
    if isinstance(value, bool):
        raise InputValidationError(TOLERANCE_MESSAGE)
    try:
        tolerance = int(str(value).strip())
    except ValueError as exc:
        raise InputValidationError(TOLERANCE_MESSAGE) from exc
    if tolerance < 0 or tolerance > 255:
        raise InputValidationError(TOLERANCE_MESSAGE)
    return tolerance


def parse_size(value: str | None) -> tuple[int, int] | None:
    """Parse ``WxH`` into positive ints; an empty value means no resize."""
    if value is None or not value.strip():
        return None
    match = _SIZE_PATTERN.match(value)
    if not match:
        raise InputValidationError(SIZE_FORMAT_MESSAGE)
    return validate_size((int(match.group(1)), int(match.group(2))))
