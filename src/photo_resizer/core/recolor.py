"""Luminance-based ink colorization for signature images."""

from typing import Tuple

import numpy as np
from PIL import Image

from .geometry import round_half_up

# Rec. 601 luma weights
LUMA_WEIGHTS = np.array([0.299, 0.587, 0.114])


def luminance(r: float, g: float, b: float) -> float:
    """Perceptual brightness of an RGB triple, normalized to ``[0, 1]``."""
    return (0.299 * r + 0.587 * g + 0.114 * b) / 255


def recolor_pixel(
    pixel: Tuple[int, int, int, int],
    ink_color: Tuple[int, int, int],
    ink_threshold: float = 0.7,
    alpha_cutoff: int = 128,
) -> Tuple[int, int, int, int]:
    """Scalar form of :func:`apply_ink_color` for a single RGBA pixel."""
    r, g, b, a = pixel
    if a < alpha_cutoff:
        return (255, 255, 255, 255)

    lum = luminance(r, g, b)
    if lum >= ink_threshold:
        return (255, 255, 255, 255)

    intensity = 1 - lum / ink_threshold
    red, green, blue = (
        round_half_up(255 - (255 - channel) * intensity) for channel in ink_color
    )
    return (red, green, blue, 255)


def apply_ink_color(
    image: Image.Image,
    ink_color: Tuple[int, int, int],
    ink_threshold: float = 0.7,
    alpha_cutoff: int = 128,
) -> Image.Image:
    """
    Repaint dark "ink" pixels in ``ink_color`` and everything else white.

    Pixels with alpha below ``alpha_cutoff`` and pixels at or above the
    luminance threshold become opaque white. Ink pixels blend from white
    towards ``ink_color`` with intensity ``1 - L / threshold``, so pure black
    maps to exactly ``ink_color``.

    Args:
        image: Canvas to recolor (any mode; treated as RGBA)
        ink_color: Target RGB triple
        ink_threshold: Luminance cutoff between ink and paper
        alpha_cutoff: Alpha below which a pixel counts as background

    Returns:
        New opaque RGBA image of the same size
    """
    pixels = np.asarray(image.convert("RGBA"), dtype=np.float64)
    rgb = pixels[..., :3]
    alpha = pixels[..., 3]

    lum = (rgb @ LUMA_WEIGHTS) / 255
    is_ink = (alpha >= alpha_cutoff) & (lum < ink_threshold)

    intensity = np.where(is_ink, 1 - lum / ink_threshold, 0.0)[..., np.newaxis]
    target = np.asarray(ink_color, dtype=np.float64)
    blended = np.floor(255 - (255 - target) * intensity + 0.5)

    out = np.empty(pixels.shape, dtype=np.uint8)
    out[..., :3] = np.clip(blended, 0, 255).astype(np.uint8)
    out[..., 3] = 255
    return Image.fromarray(out)
