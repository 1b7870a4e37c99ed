import logging
from pathlib import Path
from typing import List, Optional

import cv2
import numpy as np

from ..errors import DeviceUnavailable
from ..image_ops import decode_image

logger = logging.getLogger("processor.video")

IMAGE_SUFFIXES = (".jpg", ".jpeg", ".png")


class VideoSource:
    """
    A live frame provider. ``read`` returns the current full-resolution BGR frame,
    or ``None`` while nothing is available yet.
    """

    name: str = "video"

    def open(self) -> None:
        raise NotImplementedError

    def read(self) -> Optional[np.ndarray]:
        raise NotImplementedError

    def release(self) -> None:
        raise NotImplementedError

    @property
    def is_open(self) -> bool:
        raise NotImplementedError

    def __enter__(self) -> "VideoSource":
        self.open()
        return self

    def __exit__(self, *_exc) -> None:
        self.release()


class OpenCVVideoSource(VideoSource):
    def __init__(self, source: str | int, width: int = 1280, height: int = 720) -> None:
        if isinstance(source, str) and source.strip().isdigit():
            source = int(source.strip())
        self.source = source
        self.name = str(source)
        self.width = width
        self.height = height
        self._cap: Optional[cv2.VideoCapture] = None

    def open(self) -> None:
        if self._cap is not None:
            return
        cap = cv2.VideoCapture(self.source)
        if not cap.isOpened():
            cap.release()
            logger.error("Failed to open video source", extra={"extra_payload": {"source": self.name}})
            raise DeviceUnavailable(f"Unable to open video source: {self.name}")
        # Requested size is only a hint; devices fall back to what they support.
        cap.set(cv2.CAP_PROP_FRAME_WIDTH, self.width)
        cap.set(cv2.CAP_PROP_FRAME_HEIGHT, self.height)
        self._cap = cap
        logger.info(
            "Video source opened",
            extra={"extra_payload": {"source": self.name, "width": self.width, "height": self.height}},
        )

    def read(self) -> Optional[np.ndarray]:
        if self._cap is None:
            return None
        ok, frame = self._cap.read()
        if not ok or frame is None:
            logger.debug("Failed to read frame from source", extra={"extra_payload": {"source": self.name}})
            return None
        return frame

    def release(self) -> None:
        if self._cap is None:
            return
        self._cap.release()
        self._cap = None
        logger.info("Video source released", extra={"extra_payload": {"source": self.name}})

    @property
    def is_open(self) -> bool:
        return self._cap is not None


class ImageFolderSource(VideoSource):
    """
    Replays still images from a directory (or a single file) in name order.
    After the last image the final frame keeps being served, like a camera
    pointed at a static scene.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self.name = str(self.path)
        self._images: List[Path] = []
        self._cursor = 0
        self._last: Optional[np.ndarray] = None
        self._open = False

    def open(self) -> None:
        if self.path.is_dir():
            images = sorted(p for p in self.path.iterdir() if p.suffix.lower() in IMAGE_SUFFIXES)
        else:
            images = [self.path] if self.path.exists() else []
        if not images:
            raise DeviceUnavailable(f"No images found at {self.path}")
        self._images = images
        self._cursor = 0
        self._last = None
        self._open = True
        logger.info("Image folder source opened", extra={"extra_payload": {"source": self.name, "count": len(images)}})

    def read(self) -> Optional[np.ndarray]:
        if not self._open:
            return None
        if self._cursor < len(self._images):
            img_path = self._images[self._cursor]
            self._cursor += 1
            frame = decode_image(img_path.read_bytes())
            if frame is None:
                logger.warning("Skipping unreadable image", extra={"extra_payload": {"path": str(img_path)}})
                return self._last
            self._last = frame
        return self._last

    def release(self) -> None:
        self._open = False
        self._images = []
        self._last = None

    @property
    def is_open(self) -> bool:
        return self._open

    @property
    def frame_count(self) -> int:
        return len(self._images)


def parse_video_source(raw: str, width: int = 1280, height: int = 720) -> VideoSource:
    """Build a source from ``0`` (device index), an rtsp/http URL, or an image path."""
    raw = raw.strip()
    if raw.isdigit() or raw.startswith(("rtsp", "http")):
        return OpenCVVideoSource(raw, width=width, height=height)
    path = Path(raw)
    if path.is_dir() or path.suffix.lower() in IMAGE_SUFFIXES:
        return ImageFolderSource(path)
    # Anything else (video files, gstreamer pipelines) goes straight to OpenCV.
    return OpenCVVideoSource(raw, width=width, height=height)
