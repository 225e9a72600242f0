"""Runtime settings for the rendering and encoding stages."""

import os
from typing import Optional

from pydantic import BaseModel, Field, model_validator


FONT_PATH_ENV = "PHOTO_RESIZER_FONT_PATH"


class EncoderSettings(BaseModel):
    """Knobs of the size-targeted JPEG search."""

    max_attempts: int = Field(default=12, gt=0)
    min_quality: float = Field(default=0.1, gt=0.0, le=1.0)
    max_quality: float = Field(default=1.0, gt=0.0, le=1.0)
    tolerance: float = Field(default=0.01, gt=0.0)
    fallback_step: float = Field(default=0.05, gt=0.0)
    # Preference values map onto [preference_floor, 100]
    preference_floor: int = Field(default=30, ge=0, lt=100)

    @model_validator(mode="after")
    def _check_quality_bounds(self) -> "EncoderSettings":
        if self.min_quality >= self.max_quality:
            raise ValueError("min_quality must be below max_quality")
        return self


class RenderSettings(BaseModel):
    """Constants of the canvas stages (date band, ink colorization)."""

    band_ratio: float = Field(default=0.08, ge=0.0, lt=1.0)
    font_ratio: float = Field(default=0.6, gt=0.0)
    min_font_size: int = Field(default=12, gt=0)
    ink_threshold: float = Field(default=0.7, gt=0.0, le=1.0)
    alpha_cutoff: int = Field(default=128, ge=0, le=256)
    font_path: Optional[str] = None

    @classmethod
    def from_env(cls) -> "RenderSettings":
        """Build settings, taking the date font from the environment if set."""
        font_path = os.getenv(FONT_PATH_ENV, "").strip() or None
        return cls(font_path=font_path)
