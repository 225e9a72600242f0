"""Custom exceptions for the photo resizer."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator, Type

from .logging_config import get_logger


class PhotoResizerError(Exception):
    """Base exception for all photo resizer errors."""


class ValidationError(PhotoResizerError):
    """Raised when an output spec, crop or request is invalid.

    Always raised before any canvas is allocated.
    """


class DecodeError(PhotoResizerError):
    """Raised when the source bytes cannot be decoded as an image."""


class EncodeError(PhotoResizerError):
    """Raised when the JPEG encoder failed for every attempted quality."""


class ConfigurationError(PhotoResizerError):
    """Error raised for invalid configuration options."""


class ImageProcessingError(PhotoResizerError):
    """Error raised when a transform stage fails unexpectedly."""


@contextmanager
def stage_error_handler(
    stage: str, error_cls: Type[PhotoResizerError] = ImageProcessingError
) -> Iterator[None]:
    """Translate unexpected failures inside a pipeline stage.

    Errors that are already part of the hierarchy pass through untouched;
    anything else is logged and re-raised as ``error_cls``.
    """
    try:
        yield
    except PhotoResizerError:
        raise
    except Exception as exc:  # noqa: BLE001
        get_logger("pipeline").error(f"Stage '{stage}' failed: {exc}", exc_info=True)
        raise error_cls(f"{stage} failed: {exc}") from exc


def describe_error(exc: BaseException) -> str:
    """Return a short ``Type: message`` string for log lines and CLI output."""
    return f"{type(exc).__name__}: {exc}"
