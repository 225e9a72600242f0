"""Factory classes for creating configured service instances."""

from typing import Optional

from .codec import PillowCodec
from .config import EncoderSettings, RenderSettings
from .encoder import SizeTargetedEncoder
from .logging_config import setup_logger
from .observability import MetricsCollector, StructuredLogger
from .protocols import ImageCodecProtocol, LoggerProtocol
from .services import PhotoProcessingService


class LoggerFactory:
    """Factory for creating logger instances."""

    @staticmethod
    def create_logger(name: str, level: Optional[str] = None) -> StructuredLogger:
        """Create a structured logger on top of the centralized configuration."""
        return StructuredLogger(name, logger=setup_logger(name, level=level))


class PipelineFactory:
    """Factory for creating the complete processing pipeline."""

    @staticmethod
    def create_service(
        codec: Optional[ImageCodecProtocol] = None,
        logger: Optional[LoggerProtocol] = None,
        encoder_settings: Optional[EncoderSettings] = None,
        render_settings: Optional[RenderSettings] = None,
        metrics_collector: Optional[MetricsCollector] = None,
        debug: bool = False,
    ) -> PhotoProcessingService:
        """Create a fully configured processing service."""

        if codec is None:
            codec = PillowCodec()

        if logger is None:
            logger = LoggerFactory.create_logger(
                "photo-resizer.pipeline", level="DEBUG" if debug else None
            )

        encoder = SizeTargetedEncoder(codec, encoder_settings or EncoderSettings(), logger)

        return PhotoProcessingService(
            codec=codec,
            encoder=encoder,
            logger=logger,
            metrics_collector=metrics_collector,
            render_settings=render_settings or RenderSettings.from_env(),
        )
