from __future__ import annotations

from abc import ABC, abstractmethod

from whitebg.domain.raster import RasterImage


class BackgroundRemover(ABC):
    @abstractmethod
    def remove(self, image: RasterImage) -> RasterImage:
        """Return an RGBA raster with the background made transparent."""
