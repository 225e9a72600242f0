"""Tests for the size-targeted JPEG encoder."""

import pytest
from PIL import Image

from photo_resizer.core.config import EncoderSettings
from photo_resizer.core.encoder import SizeTargetedEncoder, normalized_preference, target_size
from photo_resizer.core.exceptions import EncodeError
from photo_resizer.testing import FakeCodec, FakeLogger, ProgressRecorder


@pytest.fixture
def canvas():
    return Image.new("RGBA", (20, 20), (255, 255, 255, 255))


def _encoder(codec, logger=None):
    return SizeTargetedEncoder(codec, EncoderSettings(), logger or FakeLogger())


class TestTargetSize:
    @pytest.mark.parametrize(
        "preference, expected", [(0, 1000), (30, 1000), (65, 1500), (100, 2000)]
    )
    def test_target_inside_window(self, preference, expected):
        assert target_size(1000, 2000, preference) == pytest.approx(expected)

    def test_normalized_preference_is_clamped(self):
        assert normalized_preference(-10) == 0.0
        assert normalized_preference(130) == 1.0


class TestSizeTargetedEncoder:
    def test_lands_in_window(self, canvas):
        codec = FakeCodec()
        outcome = _encoder(codec).encode(canvas, 30000, 50000, 80)

        assert outcome.within(30000, 50000)
        assert abs(outcome.size_bytes - outcome.target_bytes) <= 2000
        assert outcome.search_attempts <= 12
        assert len(codec.encode_calls) <= 12

    def test_preference_moves_result_within_window(self, canvas):
        low = _encoder(FakeCodec()).encode(canvas, 30000, 50000, 30)
        high = _encoder(FakeCodec()).encode(canvas, 30000, 50000, 100)

        assert low.within(30000, 50000)
        assert high.within(30000, 50000)
        assert high.size_bytes > low.size_bytes

    def test_progress_stays_in_encode_span(self, canvas):
        recorder = ProgressRecorder()
        outcome = _encoder(FakeCodec()).encode(canvas, 30000, 50000, 80, progress=recorder)

        assert len(recorder.values) == outcome.search_attempts
        assert recorder.values[0] == 65
        assert all(65 <= value < 95 for value in recorder.values)
        assert recorder.is_non_decreasing

    def test_too_large_everywhere_falls_back_to_minimum_quality(self, canvas):
        codec = FakeCodec(size_for_quality=lambda quality: 100000)
        logger = FakeLogger()
        outcome = _encoder(codec, logger).encode(canvas, 1000, 2000, 80)

        assert codec.encode_calls[-1] == 10
        assert outcome.size_bytes == 100000
        assert not outcome.within(1000, 2000)
        assert any(
            "outside size bounds" in log["message"] for log in logger.get_logs("WARNING")
        )

    def test_too_small_everywhere_climbs_to_maximum_quality(self, canvas):
        codec = FakeCodec(size_for_quality=lambda quality: 10)
        outcome = _encoder(codec).encode(canvas, 1000, 2000, 80)

        assert codec.encode_calls[-1] == 100
        assert outcome.size_bytes == 10

    def test_fallback_stops_before_overshooting(self, canvas):
        codec = FakeCodec(size_for_quality=lambda quality: 500 if quality < 95 else 5000)
        outcome = _encoder(codec).encode(canvas, 1000, 2000, 80)

        assert outcome.size_bytes == 500
        assert any(attempt.phase == "fallback" for attempt in outcome.attempts)

    def test_single_failed_encode_is_skipped(self, canvas):
        codec = FakeCodec(failing_qualities={55})
        logger = FakeLogger()
        outcome = _encoder(codec, logger).encode(canvas, 30000, 50000, 80)

        assert outcome.attempts[0].size is None
        assert outcome.within(30000, 50000)
        assert any("Encode failed" in log["message"] for log in logger.get_logs("WARNING"))

    def test_all_encodes_failing_raises(self, canvas):
        codec = FakeCodec(fail_all_encodes=True)
        with pytest.raises(EncodeError, match="failed for all"):
            _encoder(codec).encode(canvas, 1000, 2000, 80)

    def test_custom_attempt_budget(self, canvas):
        codec = FakeCodec()
        encoder = SizeTargetedEncoder(codec, EncoderSettings(max_attempts=3), FakeLogger())
        outcome = encoder.encode(canvas, 30000, 50000, 80)

        assert len(codec.encode_calls) == 3
        assert outcome.size_bytes == 44000


class TestEncoderSettings:
    def test_defaults(self):
        settings = EncoderSettings()
        assert settings.max_attempts == 12
        assert (settings.min_quality, settings.max_quality) == (0.1, 1.0)
        assert settings.fallback_step == 0.05

    def test_min_quality_below_max(self):
        with pytest.raises(ValueError):
            EncoderSettings(min_quality=0.9, max_quality=0.5)
