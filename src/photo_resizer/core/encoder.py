"""Binary search over JPEG quality to land in a byte-size window."""

from dataclasses import dataclass, field
from typing import Callable, List, Optional, Tuple

from PIL import Image

from .codec import PillowCodec, to_jpeg_quality
from .config import EncoderSettings
from .exceptions import EncodeError
from .observability import LogContext, StructuredLogger
from .progress import ENCODE_SPAN, ENCODE_START
from .protocols import ImageCodecProtocol, LoggerProtocol


@dataclass
class EncodeAttempt:
    """One call into the codec. ``size`` is None when the encode failed."""

    quality: float
    size: Optional[int]
    phase: str = "search"


@dataclass
class EncodeOutcome:
    """The chosen JPEG and the trail of attempts that led to it."""

    data: bytes
    quality: float
    target_bytes: float
    attempts: List[EncodeAttempt] = field(default_factory=list)

    @property
    def size_bytes(self) -> int:
        return len(self.data)

    @property
    def search_attempts(self) -> int:
        return sum(1 for attempt in self.attempts if attempt.phase == "search")

    def within(self, min_bytes: int, max_bytes: int) -> bool:
        return min_bytes <= self.size_bytes <= max_bytes


def normalized_preference(quality_preference: float, floor: int = 30) -> float:
    """Map a 0-100 preference onto ``[0, 1]``; anything at or below ``floor`` is 0."""
    return max(0.0, min(1.0, (quality_preference - floor) / (100 - floor)))


def target_size(
    min_bytes: int, max_bytes: int, quality_preference: float, floor: int = 30
) -> float:
    """Byte size the search aims for inside ``[min_bytes, max_bytes]``."""
    return min_bytes + (max_bytes - min_bytes) * normalized_preference(quality_preference, floor)


class SizeTargetedEncoder:
    """
    Encode a canvas as JPEG with a size between ``min_bytes`` and ``max_bytes``.

    The quality -> size relation is only roughly monotonic, so the search
    keeps the in-bounds result closest to the target rather than the last
    one. When the search never lands in bounds a linear fallback walks the
    quality down (too big) or up (too small) in fixed steps. Landing in
    bounds is best-effort: a busy image may not fit the window at any
    quality, and then the closest fallback result is returned anyway.
    """

    def __init__(
        self,
        codec: Optional[ImageCodecProtocol] = None,
        settings: Optional[EncoderSettings] = None,
        logger: Optional[LoggerProtocol] = None,
    ):
        self._codec = codec or PillowCodec()
        self._settings = settings or EncoderSettings()
        self._logger = logger or StructuredLogger("photo-resizer.encoder")

    def encode(
        self,
        canvas: Image.Image,
        min_bytes: int,
        max_bytes: int,
        quality_preference: float = 80,
        progress: Optional[Callable[[float], None]] = None,
        context: Optional[LogContext] = None,
    ) -> EncodeOutcome:
        """
        Search for the JPEG quality whose output best matches the target size.

        Args:
            canvas: Final canvas; alpha is dropped before encoding
            min_bytes: Lower size bound (inclusive)
            max_bytes: Upper size bound (inclusive)
            quality_preference: 0-100 dial picking the target inside the bounds
            progress: Optional callback receiving percentages in [65, 95)
            context: Log context of the calling invocation

        Returns:
            EncodeOutcome with the chosen bytes

        Raises:
            EncodeError: If no attempted quality produced any output
        """
        s = self._settings
        image = canvas if canvas.mode == "RGB" else canvas.convert("RGB")
        target = target_size(min_bytes, max_bytes, quality_preference, s.preference_floor)
        context = (context or LogContext()).with_operation("encode")

        self._logger.info(
            "Searching JPEG quality",
            context,
            target_bytes=round(target),
            min_bytes=min_bytes,
            max_bytes=max_bytes,
            preference=quality_preference,
        )

        attempts: List[EncodeAttempt] = []
        low, high = s.min_quality, s.max_quality
        best: Optional[Tuple[bytes, float]] = None
        best_diff = float("inf")
        last_success: Optional[Tuple[bytes, float]] = None

        while len(attempts) < s.max_attempts and high - low > s.tolerance:
            quality = (low + high) / 2
            data = self._try_encode(image, quality, attempts, "search", context)

            if progress is not None:
                progress(ENCODE_START + (len(attempts) - 1) / s.max_attempts * ENCODE_SPAN)

            if data is None:
                # Unknown size: retreat towards cheaper encodes
                high = quality
                continue

            size = len(data)
            last_success = (data, quality)

            if min_bytes <= size <= max_bytes:
                diff = abs(size - target)
                if diff < best_diff:
                    best_diff = diff
                    best = (data, quality)

            if size < target:
                low = quality
            else:
                high = quality

        if best is None:
            self._logger.info("Search found no in-bounds size, falling back", context)
            best = self._fallback(
                image, (low + high) / 2, min_bytes, max_bytes, last_success, attempts, context
            )

        data, quality = best
        outcome = EncodeOutcome(data=data, quality=quality, target_bytes=target, attempts=attempts)

        log = self._logger.info if outcome.within(min_bytes, max_bytes) else self._logger.warning
        log(
            "Encoded JPEG" if outcome.within(min_bytes, max_bytes) else "Encoded JPEG outside size bounds",
            context,
            size_bytes=outcome.size_bytes,
            quality=round(quality, 4),
            attempts=len(attempts),
        )
        return outcome

    def _fallback(
        self,
        image: Image.Image,
        quality: float,
        min_bytes: int,
        max_bytes: int,
        last_success: Optional[Tuple[bytes, float]],
        attempts: List[EncodeAttempt],
        context: LogContext,
    ) -> Tuple[bytes, float]:
        s = self._settings
        data = self._try_encode(image, quality, attempts, "fallback", context)
        if data is None:
            if last_success is None:
                raise EncodeError(
                    f"JPEG encoder failed for all {len(attempts)} attempted qualities"
                )
            data, quality = last_success

        if len(data) > max_bytes:
            q = quality
            while q > s.min_quality and len(data) > max_bytes:
                q = max(s.min_quality, q - s.fallback_step)
                candidate = self._try_encode(image, q, attempts, "fallback", context)
                if candidate is not None:
                    data, quality = candidate, q
        elif len(data) < min_bytes:
            q = quality
            while q < s.max_quality and len(data) < min_bytes:
                q = min(s.max_quality, q + s.fallback_step)
                candidate = self._try_encode(image, q, attempts, "fallback", context)
                if candidate is None:
                    continue
                if len(candidate) > max_bytes:
                    break
                data, quality = candidate, q

        return data, quality

    def _try_encode(
        self,
        image: Image.Image,
        quality: float,
        attempts: List[EncodeAttempt],
        phase: str,
        context: LogContext,
    ) -> Optional[bytes]:
        try:
            data = self._codec.encode_jpeg(image, to_jpeg_quality(quality))
        except EncodeError as exc:
            attempts.append(EncodeAttempt(quality=quality, size=None, phase=phase))
            self._logger.warning(f"Encode failed: {exc}", context, quality=round(quality, 4))
            return None

        attempts.append(EncodeAttempt(quality=quality, size=len(data), phase=phase))
        self._logger.debug(
            "Encode attempt", context, phase=phase, quality=round(quality, 4), size_bytes=len(data)
        )
        return data
