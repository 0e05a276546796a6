from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class RasterImage:
    """Interleaved 8-bit samples in row-major order (RGB or RGBA)."""

    width: int
    height: int
    channels: int
    data: bytes

    def __post_init__(self) -> None:
        if self.channels not in (3, 4):
            raise ValueError(f"Unsupported channel count: {self.channels}")
        expected = self.width * self.height * self.channels
        if len(self.data) != expected:
            raise ValueError(
                f"Buffer length {len(self.data)} does not match "
                f"{self.width}x{self.height}x{self.channels} = {expected}"
            )

    @property
    def size(self) -> tuple[int, int]:
        return self.width, self.height

    @property
    def pixel_count(self) -> int:
        return self.width * self.height

    def transparent_pixel_count(self) -> int:
        if self.channels != 4:
            return 0
        return self.data[3::4].count(0)
