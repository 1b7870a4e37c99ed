import logging
from typing import Callable, Optional

from ..dto import CaptureConfig, CapturePhase, CaptureState, MotionClass, StabilityState, StatusUpdate

logger = logging.getLogger("processor.status")

StatusObserver = Callable[[StatusUpdate], None]


def stability_percent(stable_ms: int, required_ms: int) -> int:
    if required_ms <= 0:
        return 100
    return int(min(100.0, stable_ms / required_ms * 100))


def build_status(
    stability: StabilityState,
    capture: CaptureState,
    config: CaptureConfig,
    has_reading: bool = True,
) -> StatusUpdate:
    classification: Optional[MotionClass] = stability.classification if has_reading else None
    percent = stability_percent(stability.continuous_stable_ms, config.stability_required_ms)
    countdown = capture.remaining_steps if capture.phase is CapturePhase.counting_down else None

    if capture.phase is CapturePhase.captured:
        message = "Captured"
    elif countdown is not None:
        message = f"Capturing in {countdown}..."
    elif not stability.is_stable:
        message = "Please stand still"
    elif percent < 100:
        message = f"Hold steady... {percent}%"
    else:
        message = "Ready"

    return StatusUpdate(
        classification=classification,
        stability_percent=percent,
        countdown=countdown,
        message=message,
        phase=capture.phase,
    )


class LoggingStatusObserver:
    """Logs status changes only, so a 10 Hz tick does not flood the output."""

    def __init__(self, log: logging.Logger = logger) -> None:
        self.log = log
        self._last: Optional[str] = None

    def __call__(self, update: StatusUpdate) -> None:
        if update.message == self._last:
            return
        self._last = update.message
        self.log.info(
            update.message,
            extra={
                "extra_payload": {
                    "classification": update.classification.value if update.classification else None,
                    "stability_percent": update.stability_percent,
                    "countdown": update.countdown,
                    "phase": update.phase.value,
                }
            },
        )
