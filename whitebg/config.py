from __future__ import annotations

import os

APP_NAME = "png-white-background-remover"
APP_VERSION = "1.0.0"


class Settings:
    default_tolerance: str = os.getenv("WHITEBG_DEFAULT_TOLERANCE", "10")
    log_level: str = os.getenv("WHITEBG_LOG_LEVEL", "INFO").upper()

    max_image_bytes: int = int(os.getenv("MAX_IMAGE_BYTES", str(12 * 1024 * 1024)))
    max_image_pixels: int = int(os.getenv("MAX_IMAGE_PIXELS", str(20_000_000)))


settings = Settings()
