"""Date stamp drawn into the reserved top strip of the canvas."""

import datetime
from functools import lru_cache
from typing import Optional, Union

from PIL import Image, ImageDraw, ImageFont

from .exceptions import ConfigurationError
from .geometry import WHITE_RGBA, round_half_up

DATE_FORMAT = "%d-%m-%Y"
TEXT_COLOR = (0, 0, 0, 255)

BOLD_FONT_CANDIDATES = (
    "/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf",  # Debian/Ubuntu
    "/usr/share/fonts/dejavu/DejaVuSans-Bold.ttf",  # Fedora
    "/usr/share/fonts/truetype/liberation/LiberationSans-Bold.ttf",
    "/System/Library/Fonts/Supplemental/Arial Bold.ttf",  # macOS
    "C:\\Windows\\Fonts\\arialbd.ttf",
    "DejaVuSans-Bold.ttf",
)

Font = Union[ImageFont.FreeTypeFont, ImageFont.ImageFont]


def format_date(day: datetime.date) -> str:
    return day.strftime(DATE_FORMAT)


def font_size_for_band(band_height: int, font_ratio: float = 0.6, min_size: int = 12) -> int:
    return max(min_size, round_half_up(band_height * font_ratio))


@lru_cache(maxsize=16)
def load_bold_font(size: int, font_path: Optional[str] = None) -> Font:
    """
    Load a bold sans-serif font at ``size`` pixels.

    An explicit ``font_path`` must load. Otherwise well-known system bold
    fonts are tried in order, then Pillow's bundled default font.
    """
    if font_path:
        try:
            return ImageFont.truetype(font_path, size)
        except OSError as exc:
            raise ConfigurationError(f"Cannot load date font {font_path!r}: {exc}") from exc

    for candidate in BOLD_FONT_CANDIDATES:
        try:
            return ImageFont.truetype(candidate, size)
        except OSError:
            continue
    return ImageFont.load_default(size=size)


def draw_date_band(
    canvas: Image.Image,
    band_height: int,
    today: Optional[datetime.date] = None,
    font_path: Optional[str] = None,
    font_ratio: float = 0.6,
    min_font_size: int = 12,
) -> Image.Image:
    """
    Paint rows ``[0, band_height)`` white and stamp the date centered in them.

    The text is rendered on a band-sized strip and pasted, so glyphs taller
    than the band are clipped instead of spilling into the image rows.
    Mutates and returns ``canvas``.
    """
    if band_height <= 0:
        return canvas

    text = format_date(today or datetime.date.today())
    font = load_bold_font(font_size_for_band(band_height, font_ratio, min_font_size), font_path)

    band = Image.new(canvas.mode, (canvas.width, band_height), WHITE_RGBA)
    draw = ImageDraw.Draw(band)
    left, top, right, bottom = draw.textbbox((0, 0), text, font=font)
    x = (canvas.width - (right - left)) / 2 - left
    y = (band_height - (bottom - top)) / 2 - top
    draw.text((x, y), text, fill=TEXT_COLOR, font=font)

    canvas.paste(band, (0, 0))
    return canvas
