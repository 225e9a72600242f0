"""Protocol definitions for dependency injection and testability."""

from typing import Any, Protocol

from PIL import Image


class ImageCodecProtocol(Protocol):
    """Protocol for the image codec used at the pipeline's I/O boundary."""

    def decode(self, data: bytes) -> Image.Image:
        """Decode raw bytes into an RGBA image."""
        ...

    def encode_jpeg(self, image: Image.Image, quality: int) -> bytes:
        """Encode an image as JPEG at the given 1..100 quality."""
        ...


class LoggerProtocol(Protocol):
    """Protocol for logging operations."""

    def debug(self, message: str, context: Any = None, **kwargs: Any) -> None:
        """Log debug message."""
        ...

    def info(self, message: str, context: Any = None, **kwargs: Any) -> None:
        """Log info message."""
        ...

    def warning(self, message: str, context: Any = None, **kwargs: Any) -> None:
        """Log warning message."""
        ...

    def error(self, message: str, context: Any = None, **kwargs: Any) -> None:
        """Log error message."""
        ...
