import logging
from typing import Callable, Optional

from ..dto import CaptureConfig, CapturedImage, CapturePhase, CaptureState, CaptureTrigger, StabilityState
from ..errors import CaptureUnavailable

logger = logging.getLogger("processor.scheduler")

CaptureFn = Callable[[CaptureTrigger], CapturedImage]


class CaptureScheduler:
    """
    Countdown/capture state machine fed by stability readings.

    idle -> accumulating on the first stable reading, back to idle on movement,
    accumulating -> counting_down once the stable run exceeds the required
    window, and counting_down(0) -> captured. Countdown steps are advanced by
    the owner through ``countdown_tick``; the scheduler itself has no clock.
    """

    def __init__(self, capture: CaptureFn, config: CaptureConfig) -> None:
        self._capture = capture
        self.config = config
        self._state = CaptureState.idle()
        self.captured: Optional[CapturedImage] = None
        self.closed = False
        # stable_since_ms of the last run that started a countdown
        self._committed_since: Optional[int] = None

    @property
    def state(self) -> CaptureState:
        return self._state

    def observe(self, stability: StabilityState) -> CaptureState:
        if self.closed:
            return self._state
        phase = self._state.phase

        if phase is CapturePhase.captured:
            return self._state

        if phase is CapturePhase.counting_down:
            if self.config.cancel_countdown_on_motion and not stability.is_stable:
                logger.info(
                    "Countdown cancelled by motion",
                    extra={"extra_payload": {"remaining": self._state.remaining_steps}},
                )
                self._state = CaptureState.idle()
            return self._state

        if not stability.is_stable:
            if phase is CapturePhase.accumulating:
                logger.debug("Stability lost", extra={"extra_payload": {"elapsed_ms": self._state.elapsed_ms}})
            self._state = CaptureState.idle()
            return self._state

        if (
            stability.continuous_stable_ms > self.config.stability_required_ms
            and stability.stable_since_ms != self._committed_since
        ):
            self._start_countdown(stability)
        else:
            self._state = CaptureState.accumulating(stability.continuous_stable_ms)
        return self._state

    def countdown_tick(self) -> CaptureState:
        if self.closed or self._state.phase is not CapturePhase.counting_down:
            return self._state
        remaining = (self._state.remaining_steps or 0) - 1
        if remaining > 0:
            self._state = CaptureState.counting_down(remaining)
            logger.debug("Countdown step", extra={"extra_payload": {"remaining": remaining}})
            return self._state
        self._state = CaptureState.counting_down(0)
        self._fire(CaptureTrigger.auto)
        return self._state

    def trigger_manual(self) -> CapturedImage:
        if self.closed:
            raise RuntimeError("Capture scheduler is closed")
        logger.info("Manual capture requested", extra={"extra_payload": {"phase": self._state.phase.value}})
        return self._fire(CaptureTrigger.manual)

    def reset(self) -> None:
        """Return to idle for a new episode; the run that already fired stays spent."""
        self._state = CaptureState.idle()
        self.captured = None

    def close(self) -> None:
        self.closed = True

    def _start_countdown(self, stability: StabilityState) -> None:
        steps = self.config.countdown_steps
        stable_ms = stability.continuous_stable_ms
        self._committed_since = stability.stable_since_ms
        logger.info(
            "Stable window reached, starting countdown",
            extra={"extra_payload": {"stable_ms": stable_ms, "steps": steps}},
        )
        self._state = CaptureState.counting_down(steps)
        if steps == 0:
            self._fire(CaptureTrigger.auto)

    def _fire(self, trigger: CaptureTrigger) -> CapturedImage:
        previous = self._state
        try:
            image = self._capture(trigger)
        except CaptureUnavailable:
            # A failed manual press leaves any running countdown untouched.
            self._state = CaptureState.idle() if trigger is CaptureTrigger.auto else previous
            raise
        self.captured = image
        self._state = CaptureState.captured()
        return image
