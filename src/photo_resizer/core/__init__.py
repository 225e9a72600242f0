"""Core pipeline stages and shared components of the photo resizer."""

from .logging_config import (
    configure_worker_logging,
    get_logger,
    setup_logger,
)
from .exceptions import (
    PhotoResizerError,
    ValidationError,
    DecodeError,
    EncodeError,
    ConfigurationError,
    ImageProcessingError,
)
from .models import (
    CropRegion,
    EncodedResult,
    OutputSpec,
    ProcessRequest,
    parse_hex_color,
)
from .config import EncoderSettings, RenderSettings
from .codec import PillowCodec
from .encoder import EncodeOutcome, SizeTargetedEncoder, target_size
from .geometry import CanvasLayout, rotated_bounding_box
from .progress import LatestResultGate, ProgressReporter
from .services import PhotoProcessingService, process_image

__all__ = [
    "OutputSpec",
    "CropRegion",
    "ProcessRequest",
    "EncodedResult",
    "parse_hex_color",
    "EncoderSettings",
    "RenderSettings",
    "PillowCodec",
    "SizeTargetedEncoder",
    "EncodeOutcome",
    "target_size",
    "CanvasLayout",
    "rotated_bounding_box",
    "ProgressReporter",
    "LatestResultGate",
    "PhotoProcessingService",
    "process_image",
    "setup_logger",
    "get_logger",
    "configure_worker_logging",
    "PhotoResizerError",
    "ValidationError",
    "DecodeError",
    "EncodeError",
    "ConfigurationError",
    "ImageProcessingError",
]
