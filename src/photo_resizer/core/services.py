"""Pipeline orchestration: decode, transform, decorate and encode one photo."""

import asyncio
import datetime
import time
from contextlib import closing, contextmanager
from typing import Callable, Iterator, Optional, Union

from .codec import PillowCodec
from .config import EncoderSettings, RenderSettings
from .date_band import draw_date_band
from .encoder import SizeTargetedEncoder
from .exceptions import ValidationError, stage_error_handler
from .geometry import CanvasLayout, fit_to_canvas, prepare_intermediate, round_half_up
from .logging_config import configure_worker_logging
from .models import CropRegion, EncodedResult, OutputSpec, ProcessRequest, build_model
from .observability import LogContext, MetricsCollector, StructuredLogger, timed_stage
from .progress import (
    BAND_DRAWN,
    COMPLETE,
    DECODED,
    ENCODED,
    INTERMEDIATE_READY,
    RECOLORED,
    SCALED,
    STARTED,
    ProgressCallback,
    ProgressReporter,
)
from .protocols import ImageCodecProtocol, LoggerProtocol
from .recolor import apply_ink_color

SpecInput = Union[OutputSpec, dict]
CropInput = Union[CropRegion, dict, None]


def validate_output_spec(spec: OutputSpec) -> None:
    """Check target dimensions and byte bounds of ``spec``, raising ValidationError."""
    if spec.target_width <= 0 or spec.target_height <= 0:
        raise ValidationError(
            f"Target dimensions must be positive, got {spec.target_width}x{spec.target_height}"
        )
    if spec.min_bytes < 0:
        raise ValidationError(f"min_bytes must not be negative, got {spec.min_bytes}")
    if spec.min_bytes > spec.max_bytes:
        raise ValidationError(
            f"min_bytes ({spec.min_bytes}) exceeds max_bytes ({spec.max_bytes})"
        )


def validate_crop(crop: Optional[CropRegion]) -> None:
    if crop is not None and (crop.width <= 0 or crop.height <= 0):
        raise ValidationError(f"Crop size must be positive, got {crop.width}x{crop.height}")


class PhotoProcessingService:
    """
    Turn source image bytes into a JPEG of fixed size and byte budget.

    Stages run strictly in order: decode, rotate/flatten, crop/scale,
    recolor, date band, encode. Every image buffer is created and dropped
    within one call, so one service instance can serve concurrent calls.
    """

    def __init__(
        self,
        codec: Optional[ImageCodecProtocol] = None,
        encoder: Optional[SizeTargetedEncoder] = None,
        logger: Optional[LoggerProtocol] = None,
        metrics_collector: Optional[MetricsCollector] = None,
        render_settings: Optional[RenderSettings] = None,
        today: Callable[[], datetime.date] = datetime.date.today,
    ):
        self._codec = codec or PillowCodec()
        self._logger = logger or StructuredLogger("photo-resizer.pipeline")
        self._encoder = encoder or SizeTargetedEncoder(self._codec, EncoderSettings(), self._logger)
        self._metrics_collector = metrics_collector
        self._render = render_settings or RenderSettings.from_env()
        self._today = today

    def process(
        self,
        source: bytes,
        spec: SpecInput,
        crop: CropInput = None,
        on_progress: Optional[ProgressCallback] = None,
    ) -> EncodedResult:
        """
        Run the full pipeline on ``source``.

        Args:
            source: Encoded source image (any format Pillow reads)
            spec: Output spec, as a model or a request-shaped dict
            crop: Optional crop rectangle in rotated-source coordinates
            on_progress: Called with non-decreasing percentages, ending at 100

        Returns:
            EncodedResult of exactly ``target_width x target_height``

        Raises:
            ValidationError: Invalid spec or crop; nothing is decoded
            DecodeError: Source bytes are not a readable image
            EncodeError: The encoder produced no output at any quality
        """
        start_time = time.perf_counter()
        spec = build_model(OutputSpec, spec)
        crop = build_model(CropRegion, crop) if crop is not None else None
        validate_output_spec(spec)
        validate_crop(crop)

        progress = ProgressReporter(on_progress)
        context = LogContext(component="photo_processing_service").with_metadata(
            target=f"{spec.target_width}x{spec.target_height}",
            bytes=f"{spec.min_bytes}-{spec.max_bytes}",
        )
        progress(STARTED)

        with self._stage("decode", context):
            source_image = self._codec.decode(source)
        progress(DECODED)

        rotation = crop.rotation_degrees if crop is not None else 0.0
        with closing(source_image), self._stage("prepare_intermediate", context):
            intermediate = prepare_intermediate(source_image, rotation)
        progress(INTERMEDIATE_READY)

        layout = CanvasLayout.for_output(
            spec.target_width, spec.target_height, spec.add_date_band, self._render.band_ratio
        )
        with closing(intermediate), self._stage("fit_to_canvas", context):
            canvas = fit_to_canvas(intermediate, layout, crop)
        progress(SCALED)

        if spec.ink_color is not None:
            # Closes the unrecolored canvas, rebinds to the new one
            with closing(canvas), self._stage("recolor", context):
                canvas = apply_ink_color(
                    canvas,
                    spec.ink_color,
                    self._render.ink_threshold,
                    self._render.alpha_cutoff,
                )
        progress(RECOLORED)

        with closing(canvas):
            if spec.add_date_band:
                with self._stage("date_band", context):
                    draw_date_band(
                        canvas,
                        layout.band_height,
                        today=self._today(),
                        font_path=self._render.font_path,
                        font_ratio=self._render.font_ratio,
                        min_font_size=self._render.min_font_size,
                    )
            progress(BAND_DRAWN)

            with self._stage("encode", context):
                outcome = self._encoder.encode(
                    canvas,
                    spec.min_bytes,
                    spec.max_bytes,
                    spec.quality_preference,
                    progress=progress,
                    context=context,
                )
            progress(ENCODED)

            result = EncodedResult(
                data=outcome.data,
                size_bytes=outcome.size_bytes,
                width=canvas.width,
                height=canvas.height,
                elapsed_ms=round_half_up((time.perf_counter() - start_time) * 1000),
                quality=outcome.quality,
            )

        self._logger.info(
            "Processed photo",
            context,
            size_kb=result.size_kb,
            quality=round(result.quality, 4),
            elapsed_ms=result.elapsed_ms,
        )
        progress(COMPLETE)
        return result

    def process_request(
        self,
        source: bytes,
        request: Union[ProcessRequest, dict],
        on_progress: Optional[ProgressCallback] = None,
    ) -> EncodedResult:
        """Run the pipeline for a request-shaped payload (spec plus crop)."""
        request = build_model(ProcessRequest, request)
        return self.process(
            source, request.to_output_spec(), request.to_crop_region(), on_progress
        )

    async def process_async(
        self,
        source: bytes,
        spec: SpecInput,
        crop: CropInput = None,
        on_progress: Optional[ProgressCallback] = None,
    ) -> EncodedResult:
        """Run :meth:`process` on a worker thread so the event loop stays free."""

        def run() -> EncodedResult:
            configure_worker_logging().debug("Processing photo on worker thread")
            return self.process(source, spec, crop, on_progress)

        return await asyncio.to_thread(run)

    @contextmanager
    def _stage(self, name: str, context: LogContext) -> Iterator[None]:
        with timed_stage(name, self._logger, self._metrics_collector, context):
            with stage_error_handler(name):
                yield


def process_image(
    source: bytes,
    spec: SpecInput,
    crop: CropInput = None,
    on_progress: Optional[ProgressCallback] = None,
) -> EncodedResult:
    """Process one photo with a default-configured service."""
    return PhotoProcessingService().process(source, spec, crop, on_progress)
