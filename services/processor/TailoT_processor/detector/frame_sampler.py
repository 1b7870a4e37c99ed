import logging
from typing import Optional

import cv2

from ..capture.video_source import VideoSource
from ..dto import SampledFrame
from ..image_ops import to_rgb

logger = logging.getLogger("processor.sampler")


class FrameSampler:
    """Downsamples the live frame into a small RGB buffer for cheap comparison."""

    def __init__(self, source: VideoSource, width: int = 64, height: int = 48) -> None:
        self.source = source
        self.width = width
        self.height = height

    def sample(self, now_ms: int) -> Optional[SampledFrame]:
        frame = self.source.read()
        if frame is None or frame.size == 0:
            # Source not ready yet; the next tick retries.
            logger.debug("No frame available for sampling", extra={"extra_payload": {"source": self.source.name}})
            return None
        small = cv2.resize(frame, (self.width, self.height), interpolation=cv2.INTER_AREA)
        return SampledFrame(pixels=to_rgb(small), sampled_at_ms=now_ms)
