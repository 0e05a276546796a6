from __future__ import annotations


class WhiteBgError(Exception):
    """Base class for errors reported to the user as ``Error: <message>``."""


class InputValidationError(WhiteBgError, ValueError):
    pass


class ImageIOError(WhiteBgError):
    pass


class ImageDecodeError(ImageIOError):
    pass


class ImageEncodeError(ImageIOError):
    pass
