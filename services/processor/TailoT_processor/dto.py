from __future__ import annotations

import base64
import enum
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional

import numpy as np


class MotionClass(str, enum.Enum):
    moving = "MOVING"
    stable = "STABLE"


class CapturePhase(str, enum.Enum):
    idle = "idle"
    accumulating = "accumulating"
    counting_down = "counting_down"
    captured = "captured"


class CaptureTrigger(str, enum.Enum):
    auto = "auto"
    manual = "manual"


@dataclass(frozen=True)
class CaptureConfig:
    motion_threshold: float = 30.0
    stability_required_ms: int = 2000
    sample_width: int = 64
    sample_height: int = 48
    countdown_steps: int = 3
    countdown_interval_ms: int = 1000
    check_interval_ms: int = 100
    jpeg_quality: float = 0.9
    # Off: once started, a countdown runs to completion regardless of motion.
    cancel_countdown_on_motion: bool = False

    def __post_init__(self) -> None:
        if self.motion_threshold < 0:
            raise ValueError("motion_threshold must be non-negative")
        if self.sample_width <= 0 or self.sample_height <= 0:
            raise ValueError("sample resolution must be positive")
        if self.countdown_steps < 0:
            raise ValueError("countdown_steps must be non-negative")
        if self.check_interval_ms <= 0 or self.countdown_interval_ms <= 0:
            raise ValueError("intervals must be positive")
        if not 0.0 < self.jpeg_quality <= 1.0:
            raise ValueError("jpeg_quality must be in (0, 1]")


@dataclass(frozen=True)
class SampledFrame:
    """Low-resolution RGB sample used only as a motion comparison buffer."""

    pixels: np.ndarray
    sampled_at_ms: int

    def __post_init__(self) -> None:
        if self.pixels.ndim != 3 or self.pixels.shape[2] != 3:
            raise ValueError(f"expected (height, width, 3) pixels, got {self.pixels.shape}")
        self.pixels.flags.writeable = False

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])

    @property
    def pixel_count(self) -> int:
        return self.width * self.height


@dataclass(frozen=True)
class MotionReading:
    magnitude: float
    classification: MotionClass

    @property
    def is_stable(self) -> bool:
        return self.classification is MotionClass.stable


@dataclass(frozen=True)
class StabilityState:
    classification: MotionClass = MotionClass.moving
    continuous_stable_ms: int = 0
    stable_since_ms: Optional[int] = None

    @property
    def is_stable(self) -> bool:
        return self.classification is MotionClass.stable


@dataclass(frozen=True)
class CaptureState:
    phase: CapturePhase = CapturePhase.idle
    elapsed_ms: int = 0
    remaining_steps: Optional[int] = None

    @classmethod
    def idle(cls) -> "CaptureState":
        return cls(CapturePhase.idle)

    @classmethod
    def accumulating(cls, elapsed_ms: int) -> "CaptureState":
        return cls(CapturePhase.accumulating, elapsed_ms=elapsed_ms)

    @classmethod
    def counting_down(cls, remaining_steps: int) -> "CaptureState":
        return cls(CapturePhase.counting_down, remaining_steps=remaining_steps)

    @classmethod
    def captured(cls) -> "CaptureState":
        return cls(CapturePhase.captured)


@dataclass(frozen=True)
class CapturedImage:
    image_bytes: bytes
    mime_type: str = "image/jpeg"
    captured_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_base64(self) -> str:
        return base64.b64encode(self.image_bytes).decode("ascii")

    def to_data_url(self) -> str:
        return f"data:{self.mime_type};base64,{self.to_base64()}"


@dataclass(frozen=True)
class StatusUpdate:
    classification: Optional[MotionClass]
    stability_percent: int
    countdown: Optional[int]
    message: str
    phase: CapturePhase = CapturePhase.idle
