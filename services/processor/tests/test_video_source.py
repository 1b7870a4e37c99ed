import cv2
import numpy as np
import pytest

from TailoT_processor.capture.video_source import ImageFolderSource, OpenCVVideoSource, parse_video_source
from TailoT_processor.errors import DeviceUnavailable


def write_frames(folder, values):
    folder.mkdir(parents=True, exist_ok=True)
    for idx, value in enumerate(values):
        cv2.imwrite(str(folder / f"frame_{idx:04d}.png"), np.full((60, 80, 3), value, dtype=np.uint8))


def test_folder_source_replays_in_order_then_holds_last(tmp_path):
    write_frames(tmp_path / "frames", [10, 20, 30])
    with ImageFolderSource(tmp_path / "frames") as source:
        assert source.frame_count == 3
        seen = [int(source.read()[0, 0, 0]) for _ in range(5)]
    assert seen == [10, 20, 30, 30, 30]
    assert not source.is_open
    assert source.read() is None


def test_folder_source_without_images_is_unavailable(tmp_path):
    with pytest.raises(DeviceUnavailable):
        ImageFolderSource(tmp_path).open()


def test_opencv_source_that_cannot_open_raises(tmp_path):
    source = OpenCVVideoSource(str(tmp_path / "missing.mp4"))
    with pytest.raises(DeviceUnavailable):
        source.open()
    assert not source.is_open
    assert source.read() is None


def test_parse_video_source(tmp_path):
    camera = parse_video_source("0")
    assert isinstance(camera, OpenCVVideoSource)
    assert camera.source == 0
    assert isinstance(parse_video_source("rtsp://cam.local/stream"), OpenCVVideoSource)
    assert isinstance(parse_video_source(str(tmp_path)), ImageFolderSource)
    assert isinstance(parse_video_source(str(tmp_path / "still.jpg")), ImageFolderSource)
