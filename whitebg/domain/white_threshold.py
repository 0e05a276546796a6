from __future__ import annotations

from whitebg.domain.background_remover import BackgroundRemover
from whitebg.domain.raster import RasterImage

MAX_SAMPLE = 255


def make_white_transparent(image: RasterImage, tolerance: int) -> RasterImage:
    """Clear the alpha of every pixel whose R, G and B are all >= 255 - tolerance.

    RGB samples are copied unchanged. Non-white pixels keep their alpha, or
    get 255 when the source has no alpha channel. The threshold is hard:
    there is no partial transparency at the boundary.
    """
    if not 0 <= tolerance <= MAX_SAMPLE:
        raise ValueError(f"tolerance must be within 0..{MAX_SAMPLE}, got {tolerance}")

    threshold = MAX_SAMPLE - tolerance
    src = image.data
    step = image.channels
    reds, greens, blues = src[0::step], src[1::step], src[2::step]

    out = bytearray(image.pixel_count * 4)
    out[0::4] = reds
    out[1::4] = greens
    out[2::4] = blues
    out[3::4] = src[3::4] if step == 4 else bytes([MAX_SAMPLE]) * image.pixel_count

    for index, (r, g, b) in enumerate(zip(reds, greens, blues)):
        if r >= threshold and g >= threshold and b >= threshold:
            out[index * 4 + 3] = 0

    return RasterImage(image.width, image.height, 4, bytes(out))


class WhiteThresholdRemover(BackgroundRemover):
    def __init__(self, tolerance: int) -> None:
        if not 0 <= tolerance <= MAX_SAMPLE:
            raise ValueError(f"tolerance must be within 0..{MAX_SAMPLE}, got {tolerance}")
        self._tolerance = tolerance

    @property
    def tolerance(self) -> int:
        return self._tolerance

    def remove(self, image: RasterImage) -> RasterImage:
        return make_white_transparent(image, self._tolerance)
