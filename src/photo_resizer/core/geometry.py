"""Rotation, white-flattening, cropping and scaling into the output canvas."""

import math
from dataclasses import dataclass
from typing import Optional, Tuple

from PIL import Image

from .models import CropRegion

WHITE = (255, 255, 255)
WHITE_RGBA = (255, 255, 255, 255)

Box = Tuple[float, float, float, float]


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positives."""
    return int(math.floor(value + 0.5))


@dataclass(frozen=True)
class CanvasLayout:
    """Where the date band and the image content sit on the output canvas."""

    target_width: int
    target_height: int
    band_height: int = 0

    @classmethod
    def for_output(
        cls, target_width: int, target_height: int, add_date_band: bool, band_ratio: float = 0.08
    ) -> "CanvasLayout":
        band_height = round_half_up(target_height * band_ratio) if add_date_band else 0
        return cls(target_width, target_height, band_height)

    @property
    def image_area_height(self) -> int:
        return self.target_height - self.band_height

    @property
    def image_region(self) -> Tuple[int, int, int, int]:
        """``(left, upper, right, lower)`` of the rows below the band."""
        return (0, self.band_height, self.target_width, self.target_height)


def rotated_bounding_box(width: int, height: int, degrees: float) -> Tuple[int, int]:
    """Size of the smallest upright box holding a ``width x height`` rectangle
    rotated by ``degrees`` about its center."""
    radians = math.radians(degrees)
    sin = abs(math.sin(radians))
    cos = abs(math.cos(radians))
    return (
        round_half_up(width * cos + height * sin),
        round_half_up(width * sin + height * cos),
    )


def flatten_onto_white(image: Image.Image) -> Image.Image:
    """Composite ``image`` over opaque white and drop its alpha channel."""
    background = Image.new("RGB", image.size, WHITE)
    if "A" in image.getbands():
        rgba = image.convert("RGBA")
        background.paste(rgba, (0, 0), rgba)
    else:
        background.paste(image.convert("RGB"), (0, 0))
    return background


def rotate_onto_white(image: Image.Image, degrees: float) -> Image.Image:
    """
    Rotate ``image`` clockwise by ``degrees`` onto a white canvas.

    The canvas is the rotated bounding box, so no corner is clipped; areas not
    covered by the source and any transparency end up white.
    """
    new_width, new_height = rotated_bounding_box(image.width, image.height, degrees)
    rgba = image if image.mode == "RGBA" else image.convert("RGBA")

    # Pillow rotates counter-clockwise for positive angles
    rotated = rgba.rotate(-degrees, resample=Image.Resampling.BICUBIC, expand=True)

    canvas = Image.new("RGB", (new_width, new_height), WHITE)
    offset = ((new_width - rotated.width) // 2, (new_height - rotated.height) // 2)
    canvas.paste(rotated, offset, rotated)
    return canvas


def prepare_intermediate(source: Image.Image, rotation_degrees: float = 0.0) -> Image.Image:
    """Rotate (when needed) and flatten the decoded source onto white."""
    if rotation_degrees % 360:
        return rotate_onto_white(source, rotation_degrees)
    return flatten_onto_white(source)


def center_crop_box(
    source_width: int, source_height: int, target_width: int, target_height: int
) -> Box:
    """Largest centered box of ``source`` with the target's aspect ratio."""
    target_ratio = target_width / target_height
    source_ratio = source_width / source_height

    if source_ratio > target_ratio:
        crop_width = source_height * target_ratio
        left = (source_width - crop_width) / 2
        return (left, 0.0, min(float(source_width), left + crop_width), float(source_height))

    crop_height = source_width / target_ratio
    top = (source_height - crop_height) / 2
    return (0.0, top, float(source_width), min(float(source_height), top + crop_height))


def _pad_to_crop(image: Image.Image, crop: CropRegion) -> Tuple[Image.Image, Box]:
    """Return an image/box pair covering ``crop``; outside the image is white."""
    left, upper, right, lower = crop.box
    if left >= 0 and upper >= 0 and right <= image.width and lower <= image.height:
        return image, (float(left), float(upper), float(right), float(lower))

    padded = Image.new("RGB", (crop.width, crop.height), WHITE)
    padded.paste(image, (-left, -upper))
    return padded, (0.0, 0.0, float(crop.width), float(crop.height))


def fit_to_canvas(
    intermediate: Image.Image,
    layout: CanvasLayout,
    crop: Optional[CropRegion] = None,
) -> Image.Image:
    """
    Scale the crop (or a center crop) of ``intermediate`` into the canvas.

    Args:
        intermediate: Flattened, rotated RGB source
        layout: Output canvas geometry
        crop: Rectangle in ``intermediate`` coordinates; center crop if None

    Returns:
        Opaque RGBA canvas of exactly the target size. Band rows stay white.
    """
    canvas = Image.new("RGBA", (layout.target_width, layout.target_height), WHITE_RGBA)
    area_size = (layout.target_width, layout.image_area_height)

    if crop is not None:
        source, box = _pad_to_crop(intermediate, crop)
    else:
        source = intermediate
        box = center_crop_box(intermediate.width, intermediate.height, *area_size)

    region = source.resize(area_size, resample=Image.Resampling.LANCZOS, box=box)
    canvas.paste(region.convert("RGBA"), (0, layout.band_height))
    return canvas
