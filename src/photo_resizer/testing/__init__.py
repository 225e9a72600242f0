"""Testing utilities and fakes for the photo resizer."""

from .fakes import (
    FakeCodec,
    FakeLogger,
    ProgressRecorder,
    create_noise_image,
    create_signature_image,
    create_test_image,
)

__all__ = [
    "FakeCodec",
    "FakeLogger",
    "ProgressRecorder",
    "create_noise_image",
    "create_signature_image",
    "create_test_image",
]
