"""
Exceptions raised by the crop pipeline.

All three are recoverable and meant to be shown to the user; geometry
problems are never raised, they are clamped.
"""


class CropToolError(Exception):
    """Base class for user-facing crop tool failures."""


class LoadError(CropToolError):
    """The source could not be decoded as an image."""

    def __init__(self, message: str = "Could not read the image for cropping."):
        super().__init__(message)


class CropExportError(CropToolError):
    """Rasterizing or encoding the crop failed."""

    def __init__(self, message: str = "Could not produce the crop."):
        super().__init__(message)


class FetchError(CropToolError):
    """A remote image could not be downloaded."""

    def __init__(self, message: str = "Could not download the image for cropping."):
        super().__init__(message)
