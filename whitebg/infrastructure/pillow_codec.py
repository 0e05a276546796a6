from __future__ import annotations

import io
from dataclasses import dataclass
from pathlib import Path

from PIL import Image, UnidentifiedImageError

from whitebg.domain.errors import ImageDecodeError, ImageEncodeError, InputValidationError
from whitebg.domain.raster import RasterImage

SIZE_FORMAT_MESSAGE = "Size format should be WIDTHxHEIGHT (e.g., 32x32)"

# Samples wider than 8 bits would be clamped, not scaled, by convert().
_WIDE_SAMPLE_MODES = ("I", "F")


@dataclass(frozen=True)
class DecodedImage:
    raster: RasterImage
    format: str


def _normalize_mode(image: Image.Image) -> Image.Image:
    if image.mode in ("RGB", "RGBA"):
        return image
    if image.mode.startswith(_WIDE_SAMPLE_MODES):
        raise ImageDecodeError(
            f"Unsupported bit depth: mode {image.mode} (only 8 bits per channel is supported)"
        )
    has_alpha = "A" in image.getbands() or "transparency" in image.info
    return image.convert("RGBA" if has_alpha else "RGB")


def raster_from_pil(image: Image.Image) -> RasterImage:
    normalized = _normalize_mode(image)
    width, height = normalized.size
    return RasterImage(width, height, len(normalized.getbands()), normalized.tobytes())


def raster_to_pil(raster: RasterImage) -> Image.Image:
    mode = "RGBA" if raster.channels == 4 else "RGB"
    return Image.frombytes(mode, raster.size, raster.data)


def _decode(source: Path | io.BytesIO, label: str, max_pixels: int | None = None) -> DecodedImage:
    try:
        with Image.open(source) as image:
            width, height = image.size
            if width <= 0 or height <= 0:
                raise InputValidationError("Invalid image dimensions")
            # Checked before load() so oversized images are never decompressed.
            if max_pixels is not None and width * height > max_pixels:
                raise InputValidationError(f"Image too large in pixels. Max allowed is {max_pixels}")
            image.load()
            fmt = (image.format or "").upper() or "UNKNOWN"
            raster = raster_from_pil(image)
    except (UnidentifiedImageError, OSError) as exc:
        raise ImageDecodeError(f"Could not read image {label}: {exc}") from exc
    return DecodedImage(raster=raster, format=fmt)


def load_image(path: str | Path) -> DecodedImage:
    return _decode(Path(path), str(path))


def decode_image_bytes(image_bytes: bytes, max_pixels: int | None = None) -> DecodedImage:
    if not image_bytes:
        raise InputValidationError("Uploaded file is empty")
    return _decode(io.BytesIO(image_bytes), "from upload", max_pixels)


def validate_size(size: tuple[int, int]) -> tuple[int, int]:
    try:
        width, height = size
    except (TypeError, ValueError) as exc:
        raise InputValidationError(SIZE_FORMAT_MESSAGE) from exc
    for value in (width, height):
        if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
            raise InputValidationError(SIZE_FORMAT_MESSAGE)
    return width, height


def resize_image(image: Image.Image, size: tuple[int, int]) -> Image.Image:
    return image.resize(validate_size(size))


def encode_png(image: Image.Image) -> bytes:
    output = io.BytesIO()
    image.save(output, format="PNG")
    return output.getvalue()


def save_png(image: Image.Image, path: str | Path) -> Path:
    target = Path(path)
    try:
        image.save(target, format="PNG")
    except OSError as exc:
        raise ImageEncodeError(f"Could not write {target}: {exc}") from exc
    return target
