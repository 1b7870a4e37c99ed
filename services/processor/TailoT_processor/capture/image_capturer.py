import logging

from ..dto import CapturedImage, CaptureTrigger
from ..errors import CaptureUnavailable
from ..image_ops import encode_jpeg
from .video_source import VideoSource

logger = logging.getLogger("processor.capture")


class ImageCapturer:
    def __init__(self, source: VideoSource, quality: float = 0.9) -> None:
        self.source = source
        self.quality = quality

    def capture(self, trigger: CaptureTrigger = CaptureTrigger.auto) -> CapturedImage:
        frame = self.source.read() if self.source.is_open else None
        if frame is None or frame.size == 0:
            logger.warning(
                "No frame available for capture",
                extra={"extra_payload": {"source": self.source.name, "trigger": trigger.value}},
            )
            raise CaptureUnavailable(f"No frame available from {self.source.name}")

        image_bytes = encode_jpeg(frame, quality=round(self.quality * 100))
        height, width = frame.shape[:2]
        logger.info(
            "Captured still",
            extra={
                "extra_payload": {
                    "source": self.source.name,
                    "trigger": trigger.value,
                    "width": width,
                    "height": height,
                    "bytes": len(image_bytes),
                }
            },
        )
        return CapturedImage(image_bytes=image_bytes)
