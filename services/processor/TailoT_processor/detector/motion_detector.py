import logging
from typing import Optional

import numpy as np

from ..dto import MotionClass, MotionReading, SampledFrame

logger = logging.getLogger("processor.motion")

CHANNELS = 3


class MotionDetector:
    """
    Frame-differencing motion detector. The magnitude is the mean absolute
    per-channel intensity delta (0-255 scale) between two consecutive samples;
    anything above ``threshold`` counts as movement.
    """

    def __init__(self, threshold: float = 30.0, camera: str | None = None) -> None:
        self.threshold = threshold
        self.camera = camera
        self._previous: Optional[SampledFrame] = None

    def compare(self, current: SampledFrame, previous: SampledFrame) -> MotionReading:
        if current.pixels.shape != previous.pixels.shape:
            raise ValueError(
                f"Sample resolution changed: {previous.pixels.shape} -> {current.pixels.shape}"
            )
        # Widen before subtracting so uint8 does not wrap around.
        diff = np.abs(current.pixels.astype(np.int16) - previous.pixels.astype(np.int16))
        magnitude = float(diff.sum()) / float(current.pixel_count * CHANNELS)
        classification = MotionClass.moving if magnitude > self.threshold else MotionClass.stable
        return MotionReading(magnitude=magnitude, classification=classification)

    def detect(self, frame: SampledFrame) -> Optional[MotionReading]:
        previous = self._previous
        self._previous = frame
        if previous is None:
            logger.debug(
                "First sample stored as baseline",
                extra={"extra_payload": {"camera": self.camera, "sampled_at_ms": frame.sampled_at_ms}},
            )
            return None

        reading = self.compare(frame, previous)
        logger.debug(
            "Motion reading",
            extra={
                "extra_payload": {
                    "camera": self.camera,
                    "magnitude": round(reading.magnitude, 3),
                    "classification": reading.classification.value,
                }
            },
        )
        return reading

    def reset(self) -> None:
        self._previous = None
