import numpy as np
import pytest

from TailoT_processor.detector.motion_detector import MotionDetector
from TailoT_processor.dto import MotionClass, SampledFrame


def sample(value, t=0, shape=(48, 64, 3)):
    return SampledFrame(pixels=np.full(shape, value, dtype=np.uint8), sampled_at_ms=t)


def test_first_frame_produces_no_reading():
    detector = MotionDetector()
    assert detector.detect(sample(10)) is None


def test_identical_frames_are_stable_from_second_frame():
    detector = MotionDetector(threshold=30)
    readings = [detector.detect(sample(120, t)) for t in range(0, 1000, 100)]
    assert readings[0] is None
    for reading in readings[1:]:
        assert reading.magnitude == 0.0
        assert reading.classification is MotionClass.stable


def test_magnitude_is_mean_per_channel_delta():
    detector = MotionDetector()
    reading = detector.compare(sample(50), sample(10))
    assert reading.magnitude == pytest.approx(40.0)
    assert reading.classification is MotionClass.moving


def test_partial_change_is_averaged_over_all_pixels():
    previous = np.zeros((48, 64, 3), dtype=np.uint8)
    current = previous.copy()
    current[:24] = 120  # top half only
    reading = MotionDetector(threshold=30).compare(
        SampledFrame(current, 100), SampledFrame(previous, 0)
    )
    assert reading.magnitude == pytest.approx(60.0)
    assert reading.classification is MotionClass.moving


def test_difference_does_not_wrap_around_uint8():
    reading = MotionDetector().compare(sample(0), sample(255))
    assert reading.magnitude == pytest.approx(255.0)


def test_threshold_boundary_counts_as_stable():
    reading = MotionDetector(threshold=30).compare(sample(30), sample(0))
    assert reading.magnitude == pytest.approx(30.0)
    assert reading.classification is MotionClass.stable


def test_threshold_is_configurable():
    current, previous = sample(15), sample(0)
    assert MotionDetector(threshold=30).compare(current, previous).classification is MotionClass.stable
    assert MotionDetector(threshold=10).compare(current, previous).classification is MotionClass.moving


def test_resolution_change_is_rejected():
    with pytest.raises(ValueError):
        MotionDetector().compare(sample(0, shape=(48, 64, 3)), sample(0, shape=(24, 32, 3)))


def test_reset_drops_baseline():
    detector = MotionDetector()
    detector.detect(sample(0))
    detector.reset()
    assert detector.detect(sample(200)) is None


def test_sampled_frame_is_read_only():
    frame = sample(1)
    with pytest.raises(ValueError):
        frame.pixels[0, 0, 0] = 5
