from __future__ import annotations

import logging
from pathlib import Path

from PIL import Image

from whitebg.infrastructure.pillow_codec import resize_image, save_png

FAVICON_SIZES: tuple[int, ...] = (16, 32, 48)

logger = logging.getLogger("whitebg.favicons")


def favicon_path(output_path: str | Path, size: int) -> Path:
    path = Path(output_path)
    return path.with_name(f"{path.stem}_{size}x{size}.png")


def render_favicons(image: Image.Image, sizes: tuple[int, ...] = FAVICON_SIZES) -> dict[int, Image.Image]:
    # Each variant comes from the same source image, never from a smaller variant.
    return {size: resize_image(image, (size, size)) for size in sizes}


def generate_favicons(
    image: Image.Image,
    output_path: str | Path,
    sizes: tuple[int, ...] = FAVICON_SIZES,
) -> list[Path]:
    written: list[Path] = []
    for size in sizes:
        target = save_png(resize_image(image, (size, size)), favicon_path(output_path, size))
        logger.info("✓ Generated %dx%d: %s", size, size, target)
        written.append(target)
    return written
