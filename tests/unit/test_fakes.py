"""Tests for the testing fakes themselves."""

import io

import pytest
from PIL import Image

from photo_resizer.core.exceptions import DecodeError, EncodeError
from photo_resizer.testing import (
    FakeCodec,
    FakeLogger,
    ProgressRecorder,
    create_noise_image,
    create_signature_image,
    create_test_image,
)


class TestFakeCodec:
    def test_scripted_sizes(self):
        codec = FakeCodec(size_for_quality=lambda quality: quality * 10)
        data = codec.encode_jpeg(Image.new("RGB", (2, 2)), 40)
        assert len(data) == 400
        assert codec.encode_calls == [40]

    def test_failing_qualities(self):
        codec = FakeCodec(failing_qualities=[30])
        with pytest.raises(EncodeError):
            codec.encode_jpeg(Image.new("RGB", (2, 2)), 30)
        assert len(codec.encode_jpeg(Image.new("RGB", (2, 2)), 31)) == 31000

    def test_decodes_real_images(self):
        codec = FakeCodec()
        image = codec.decode(create_test_image(30, 20))
        assert image.size == (30, 20)
        assert codec.decode_calls == 1

    def test_simulated_decode_failure(self):
        with pytest.raises(DecodeError):
            FakeCodec(fail_decode=True).decode(create_test_image(10, 10))


class TestFakeLogger:
    def test_records_context(self):
        from photo_resizer.core.observability import LogContext

        logger = FakeLogger()
        context = LogContext(operation="encode").with_metadata(target="200x230")
        logger.info("hello", context, size=3)
        logger.warning("careful")

        entry = logger.get_logs("INFO")[0]
        assert entry["message"] == "hello"
        assert entry["operation"] == "encode"
        assert entry["target"] == "200x230"
        assert entry["size"] == 3
        assert len(logger.get_logs()) == 2

        logger.clear_logs()
        assert logger.get_logs() == []


def test_progress_recorder():
    recorder = ProgressRecorder()
    for value in (5, 15, 15, 40):
        recorder(value)
    assert recorder.is_non_decreasing
    recorder(10)
    assert not recorder.is_non_decreasing


def test_create_test_image_formats():
    jpeg = create_test_image(64, 48)
    png = create_test_image(64, 48, fmt="PNG")
    assert jpeg[:2] == b"\xff\xd8"
    assert Image.open(io.BytesIO(png)).format == "PNG"
    assert Image.open(io.BytesIO(png)).size == (64, 48)


def test_create_test_image_is_deterministic():
    assert create_test_image(40, 40, fmt="PNG") == create_test_image(40, 40, fmt="PNG")


def test_create_noise_image():
    image = create_noise_image(50, 40)
    assert image.size == (50, 40)
    assert image.mode == "RGB"


def test_create_signature_image_is_transparent_png():
    with Image.open(io.BytesIO(create_signature_image())) as image:
        assert image.mode == "RGBA"
        assert image.getpixel((0, 0))[3] == 0
        assert image.getextrema()[3] == (0, 255)
