from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from PIL import Image

from whitebg.application.favicon_generator import generate_favicons
from whitebg.domain.background_remover import BackgroundRemover
from whitebg.domain.raster import RasterImage
from whitebg.infrastructure.pillow_codec import (
    decode_image_bytes,
    encode_png,
    load_image,
    raster_to_pil,
    resize_image,
    save_png,
)

logger = logging.getLogger("whitebg.use_case")


@dataclass
class RemoveBackgroundOptions:
    size: tuple[int, int] | None = None
    favicon: bool = False


@dataclass
class ProcessResult:
    output_path: Path
    width: int
    height: int
    transparent_pixels: int
    favicon_paths: list[Path] = field(default_factory=list)


class RemoveBackgroundUseCase:
    def __init__(self, remover: BackgroundRemover) -> None:
        self._remover = remover

    def render(self, raster: RasterImage, size: tuple[int, int] | None = None) -> tuple[Image.Image, int]:
        """Return the processed image and the transparent pixel count before any resize."""
        processed = self._remover.remove(raster)
        transparent = processed.transparent_pixel_count()
        image = raster_to_pil(processed)
        if size is not None:
            logger.info("Resizing to: %dx%d", size[0], size[1])
            image = resize_image(image, size)
        return image, transparent

    def execute(
        self,
        image_bytes: bytes,
        size: tuple[int, int] | None = None,
        max_pixels: int | None = None,
    ) -> bytes:
        decoded = decode_image_bytes(image_bytes, max_pixels)
        image, _ = self.render(decoded.raster, size)
        return encode_png(image)

    def process_file(
        self,
        input_path: str | Path,
        output_path: str | Path,
        options: RemoveBackgroundOptions | None = None,
    ) -> ProcessResult:
        opts = options or RemoveBackgroundOptions()
        decoded = load_image(input_path)
        raster = decoded.raster
        logger.info("Input dimensions: %dx%d", raster.width, raster.height)
        if decoded.format != "PNG":
            logger.info("Converting to PNG format...")

        image, transparent = self.render(raster, opts.size)
        logger.info("Transparent pixels: %d of %d", transparent, raster.pixel_count)

        target = save_png(image, output_path)
        logger.info("✓ Processed image saved: %s", target)

        result = ProcessResult(
            output_path=target,
            width=image.width,
            height=image.height,
            transparent_pixels=transparent,
        )
        if opts.favicon:
            logger.info("Generating favicon sizes...")
            result.favicon_paths = generate_favicons(image, target)
        return result
