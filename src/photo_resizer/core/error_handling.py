# src/photo_resizer/core/error_handling.py

import functools
import logging

from PIL import Image, UnidentifiedImageError

from .exceptions import DecodeError, EncodeError, PhotoResizerError


def with_error_handling(func):
    """
    A decorator to wrap codec functions with standardized error handling.

    Pillow failures are logged and translated into the resizer's exception
    hierarchy: anything raised while decoding becomes ``DecodeError`` and
    anything raised while encoding becomes ``EncodeError``. Functions are
    classified by name (``decode*`` / ``encode*``); other functions only get
    the logging.
    """
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        logger = logging.getLogger(func.__module__ + '.' + func.__name__)
        try:
            return func(*args, **kwargs)
        except PhotoResizerError:
            raise
        except Exception as e:
            logger.error(
                f"Error in '{func.__name__}': {e}",
                exc_info=True
            )
            if func.__name__.startswith('decode'):
                if isinstance(e, UnidentifiedImageError):
                    raise DecodeError(f"Unrecognized image data in {func.__name__}: {e}") from e
                if isinstance(e, Image.DecompressionBombError):
                    raise DecodeError(f"Image too large to decode safely in {func.__name__}: {e}") from e
                if isinstance(e, (OSError, SyntaxError, ValueError)):
                    raise DecodeError(f"Failed to decode image in {func.__name__}: {e}") from e
            if func.__name__.startswith('encode') and isinstance(e, (OSError, ValueError)):
                raise EncodeError(f"JPEG encoding failed in {func.__name__}: {e}") from e
            raise
    return wrapper
