"""Shared data models for the photo resizer."""

import math
import re
from typing import Any, Dict, Optional, Tuple, Type, TypeVar

import pydantic
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .exceptions import ValidationError

RGB = Tuple[int, int, int]

_HEX_COLOR_RE = re.compile(r"^#?([0-9a-fA-F]{2})([0-9a-fA-F]{2})([0-9a-fA-F]{2})$")

M = TypeVar("M", bound=BaseModel)


def parse_hex_color(value: str) -> RGB:
    """Parse ``#RRGGBB`` (the ``#`` is optional) into an RGB triple."""
    match = _HEX_COLOR_RE.match(value.strip())
    if not match:
        raise ValueError(f"Invalid hex color: {value!r}")
    r, g, b = (int(group, 16) for group in match.groups())
    return (r, g, b)


class CropRegion(BaseModel):
    """Rectangle of the rotated source that is scaled into the output."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    x: int
    y: int
    width: int = Field(gt=0)
    height: int = Field(gt=0)
    rotation_degrees: float = Field(default=0.0, alias="rotationDegrees")

    @field_validator("rotation_degrees")
    @classmethod
    def _normalize_rotation(cls, value: float) -> float:
        if not math.isfinite(value):
            raise ValueError("rotation must be a finite number")
        normalized = value % 360.0
        # Tiny negative angles wrap to exactly 360.0
        return 0.0 if normalized >= 360.0 else normalized

    @property
    def box(self) -> Tuple[int, int, int, int]:
        """The crop as a Pillow ``(left, upper, right, lower)`` box."""
        return (self.x, self.y, self.x + self.width, self.y + self.height)


class OutputSpec(BaseModel):
    """Dimensions, byte budget and optional decorations of the output."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    target_width: int = Field(gt=0, alias="targetWidth")
    target_height: int = Field(gt=0, alias="targetHeight")
    min_bytes: int = Field(ge=0, alias="minBytes")
    max_bytes: int = Field(ge=0, alias="maxBytes")
    quality_preference: int = Field(default=80, alias="qualityPreference")
    add_date_band: bool = Field(default=False, alias="addDateBand")
    ink_color: Optional[RGB] = Field(default=None, alias="inkColor")

    @field_validator("quality_preference")
    @classmethod
    def _clamp_preference(cls, value: int) -> int:
        return max(0, min(100, value))

    @field_validator("ink_color", mode="before")
    @classmethod
    def _parse_ink_color(cls, value: Any) -> Any:
        if isinstance(value, str):
            return parse_hex_color(value)
        return value

    @field_validator("ink_color")
    @classmethod
    def _check_channels(cls, value: Optional[RGB]) -> Optional[RGB]:
        if value is not None and any(not 0 <= channel <= 255 for channel in value):
            raise ValueError(f"Color channels must be within 0..255, got {value}")
        return value

    @model_validator(mode="after")
    def _check_byte_bounds(self) -> "OutputSpec":
        if self.min_bytes > self.max_bytes:
            raise ValueError(
                f"min_bytes ({self.min_bytes}) exceeds max_bytes ({self.max_bytes})"
            )
        return self

    @classmethod
    def from_kilobytes(
        cls, target_width: int, target_height: int, min_kb: float, max_kb: float, **kwargs: Any
    ) -> "OutputSpec":
        """Build a spec from size bounds in KB (1 KB = 1024 bytes)."""
        return cls(
            target_width=target_width,
            target_height=target_height,
            min_bytes=int(round(min_kb * 1024)),
            max_bytes=int(round(max_kb * 1024)),
            **kwargs,
        )


class ProcessRequest(OutputSpec):
    """External request: an output spec plus an optional crop rectangle."""

    crop: Optional[CropRegion] = None

    def to_output_spec(self) -> OutputSpec:
        return OutputSpec(**self.model_dump(exclude={"crop"}))

    def to_crop_region(self) -> Optional[CropRegion]:
        return self.crop


class EncodedResult(BaseModel):
    """The encoded JPEG and what it took to produce it."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    data: bytes = Field(alias="bytes", repr=False)
    size_bytes: int = Field(alias="sizeBytes")
    width: int
    height: int
    elapsed_ms: int = Field(alias="elapsedMs")
    quality: float = 0.0

    @property
    def size_kb(self) -> float:
        return round(self.size_bytes / 1024, 2)

    def to_response(self) -> Dict[str, Any]:
        """Serialize to the camelCase response shape."""
        return self.model_dump(by_alias=True, exclude={"quality"})


def build_model(model_cls: Type[M], data: Any) -> M:
    """Validate ``data`` into ``model_cls``, raising the resizer's ValidationError."""
    if isinstance(data, model_cls):
        return data
    try:
        return model_cls.model_validate(data)
    except pydantic.ValidationError as exc:
        raise ValidationError(f"Invalid {model_cls.__name__}: {exc}") from exc
