"""Integration tests for the complete pipeline with the real Pillow codec."""

import datetime
import io

import numpy as np
import pytest
from PIL import Image

from photo_resizer.core import process_image
from photo_resizer.core.codec import PillowCodec
from photo_resizer.core.config import EncoderSettings, RenderSettings
from photo_resizer.core.encoder import SizeTargetedEncoder
from photo_resizer.core.factories import PipelineFactory
from photo_resizer.core.models import OutputSpec
from photo_resizer.core.services import PhotoProcessingService
from photo_resizer.testing.fakes import (
    FakeLogger,
    ProgressRecorder,
    create_noise_image,
    create_signature_image,
    create_test_image,
)


def _decode(data: bytes) -> Image.Image:
    with Image.open(io.BytesIO(data)) as image:
        image.load()
        assert image.format == "JPEG"
        return image.convert("RGB")


@pytest.fixture(scope="module")
def photo() -> bytes:
    return create_test_image(1000, 1200)


@pytest.fixture
def service():
    return PipelineFactory.create_service(
        logger=FakeLogger(), render_settings=RenderSettings()
    )


class TestPipelineIntegration:
    """End-to-end runs from source bytes to final JPEG."""

    def test_passport_photo_lands_in_window(self, service, photo):
        spec = OutputSpec.from_kilobytes(200, 230, 10, 50)
        recorder = ProgressRecorder()

        result = service.process(photo, spec, on_progress=recorder)

        assert (result.width, result.height) == (200, 230)
        assert 10240 <= result.size_bytes <= 51200
        assert _decode(result.data).size == (200, 230)
        assert recorder.values[-1] == 100
        assert recorder.is_non_decreasing

    def test_higher_preference_gives_larger_file(self, service, photo):
        low = service.process(photo, OutputSpec.from_kilobytes(200, 230, 10, 50, quality_preference=30))
        high = service.process(photo, OutputSpec.from_kilobytes(200, 230, 10, 50, quality_preference=100))

        assert 10240 <= low.size_bytes <= 51200
        assert 10240 <= high.size_bytes <= 51200
        assert high.size_bytes >= low.size_bytes

    def test_incompressible_image_ends_above_window(self):
        codec = PillowCodec()
        encoder = SizeTargetedEncoder(codec, EncoderSettings(), FakeLogger())

        outcome = encoder.encode(create_noise_image(200, 230), 200, 400, 80)

        # No quality fits per-pixel noise into 400 bytes
        assert outcome.size_bytes > 400
        assert outcome.quality == pytest.approx(EncoderSettings().min_quality)
        assert _decode(outcome.data).size == (200, 230)

    def test_incompressible_source_through_service(self, service):
        buffer = io.BytesIO()
        create_noise_image(400, 460).save(buffer, format="PNG")

        result = service.process(buffer.getvalue(), {
            "targetWidth": 200, "targetHeight": 230, "minBytes": 200, "maxBytes": 400,
        })

        assert result.size_bytes > 400
        assert _decode(result.data).size == (200, 230)

    @pytest.mark.parametrize("rotation", [90, 180, 270])
    def test_right_angle_rotations(self, service, rotation):
        source = create_test_image(300, 200)
        rotated_size = (200, 300) if rotation in (90, 270) else (300, 200)
        crop = {"x": 0, "y": 0, "width": rotated_size[0], "height": rotated_size[1],
                "rotationDegrees": rotation}

        result = service.process(source, OutputSpec.from_kilobytes(100, 150, 1, 60), crop)

        assert _decode(result.data).size == (100, 150)

    def test_signature_with_ink_and_date(self, service):
        spec = OutputSpec.from_kilobytes(
            300, 120, 2, 40, ink_color="#0000FF", add_date_band=True
        )
        result = service.process(create_signature_image(), spec)

        pixels = np.asarray(_decode(result.data)).astype(int)
        blue_ink = (pixels[..., 2] > 150) & (pixels[..., 0] < 100) & (pixels[..., 1] < 100)
        assert blue_ink.any()
        # Paper stays white away from the stroke
        assert pixels[-2, 1].min() > 230

    def test_process_image_helper(self, photo):
        result = process_image(
            photo,
            {"targetWidth": 120, "targetHeight": 160, "minBytes": 2048, "maxBytes": 30720,
             "addDateBand": True},
        )
        image = _decode(result.data)
        assert image.size == (120, 160)
        # Band background is white in the top-left corner
        assert min(image.getpixel((1, 1))) > 230

    def test_date_is_stamped(self):
        service = PhotoProcessingService(
            codec=PillowCodec(),
            logger=FakeLogger(),
            render_settings=RenderSettings(),
            today=lambda: datetime.date(2024, 12, 31),
        )
        spec = OutputSpec.from_kilobytes(200, 230, 5, 60, add_date_band=True)

        result = service.process(create_test_image(200, 230), spec)

        band = _decode(result.data).crop((0, 0, 200, 18)).convert("L")
        assert band.getextrema()[0] < 100
