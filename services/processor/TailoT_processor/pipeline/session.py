import logging
import threading
import time
from typing import Callable, Iterable, Optional

from ..capture.image_capturer import ImageCapturer
from ..capture.video_source import VideoSource
from ..detector.frame_sampler import FrameSampler
from ..detector.motion_detector import MotionDetector
from ..dto import CaptureConfig, CapturedImage, CapturePhase, CaptureState, StatusUpdate
from ..errors import CaptureUnavailable
from ..logging_utils import log_span
from .scheduler import CaptureScheduler
from .stability import StabilityTracker
from .status import StatusObserver, build_status

logger = logging.getLogger("processor.session")


def monotonic_ms() -> int:
    return int(time.monotonic() * 1000)


class CaptureSession:
    """
    One capture session: owns the video source, the comparison baseline and the
    scheduler, and drives them from a single periodic tick.

    Use as a context manager so the source is released on every exit path::

        with CaptureSession(source, config) as session:
            image = session.run()
    """

    def __init__(
        self,
        source: VideoSource,
        config: Optional[CaptureConfig] = None,
        observers: Optional[Iterable[StatusObserver]] = None,
        clock: Callable[[], int] = monotonic_ms,
    ) -> None:
        self.source = source
        self.config = config or CaptureConfig()
        self.sampler = FrameSampler(source, self.config.sample_width, self.config.sample_height)
        self.detector = MotionDetector(self.config.motion_threshold, camera=source.name)
        self.tracker = StabilityTracker()
        self.capturer = ImageCapturer(source, self.config.jpeg_quality)
        self.scheduler = CaptureScheduler(self.capturer.capture, self.config)
        self.observers = list(observers or [])
        self.clock = clock
        self.stop_event = threading.Event()
        self.last_status: Optional[StatusUpdate] = None
        self.closed = False
        self._lock = threading.Lock()
        self._next_countdown_at: Optional[int] = None
        self._has_reading = False

    def __enter__(self) -> "CaptureSession":
        self.open()
        return self

    def __exit__(self, *_exc) -> None:
        self.close()

    @property
    def state(self) -> CaptureState:
        return self.scheduler.state

    @property
    def result(self) -> Optional[CapturedImage]:
        return self.scheduler.captured

    def open(self) -> None:
        self.source.open()
        logger.info("Capture session opened", extra={"extra_payload": {"source": self.source.name}})

    def step(self, now_ms: Optional[int] = None) -> CaptureState:
        """Run one sampling tick, advancing the countdown if its deadline passed."""
        with self._lock:
            if self.closed:
                return self.scheduler.state
            now = self.clock() if now_ms is None else now_ms
            try:
                self._advance(now)
            except CaptureUnavailable:
                self._recover()
            self._publish()
            return self.scheduler.state

    def trigger_manual(self) -> CapturedImage:
        with self._lock:
            if self.closed:
                raise RuntimeError("Capture session is closed")
            if self.scheduler.captured is not None:
                logger.info("Manual capture ignored, session already captured")
                return self.scheduler.captured
            image = self.scheduler.trigger_manual()
            self._next_countdown_at = None
            self._publish()
            return image

    def run(self, timeout: Optional[float] = None) -> Optional[CapturedImage]:
        """Tick until a still is captured; ``None`` if cancelled or timed out."""
        interval = self.config.check_interval_ms / 1000.0
        deadline = None if timeout is None else time.monotonic() + timeout
        log_span(
            logger,
            "Capture session running",
            source=self.source.name,
            check_interval_ms=self.config.check_interval_ms,
            stability_required_ms=self.config.stability_required_ms,
        )
        while not self.stop_event.is_set():
            self.step()
            if self.result is not None:
                return self.result
            if deadline is not None and time.monotonic() >= deadline:
                logger.warning("Capture session timed out", extra={"extra_payload": {"timeout": timeout}})
                return None
            self.stop_event.wait(interval)
        logger.info("Capture session cancelled", extra={"extra_payload": {"source": self.source.name}})
        return self.result

    def cancel(self) -> None:
        self.stop_event.set()

    def close(self) -> None:
        self.stop_event.set()
        with self._lock:
            if self.closed:
                return
            self.closed = True
            self.scheduler.close()
            self._next_countdown_at = None
            try:
                self.source.release()
            finally:
                log_span(
                    logger,
                    "Capture session closed",
                    source=self.source.name,
                    phase=self.scheduler.state.phase.value,
                    captured=self.scheduler.captured is not None,
                )

    def _advance(self, now: int) -> None:
        if self.scheduler.state.phase is CapturePhase.captured:
            return
        frame = self.sampler.sample(now)
        if frame is not None:
            reading = self.detector.detect(frame)
            if reading is not None:
                self._has_reading = True
                stability = self.tracker.update(reading, now)
                before = self.scheduler.state.phase
                after = self.scheduler.observe(stability)
                if after.phase is CapturePhase.counting_down and before is not CapturePhase.counting_down:
                    self._next_countdown_at = now + self.config.countdown_interval_ms

        # Countdown runs on wall-clock time, independent of frame availability.
        if (
            self.scheduler.state.phase is CapturePhase.counting_down
            and self._next_countdown_at is not None
            and now >= self._next_countdown_at
        ):
            self._next_countdown_at += self.config.countdown_interval_ms
            self.scheduler.countdown_tick()
        if self.scheduler.state.phase is not CapturePhase.counting_down:
            self._next_countdown_at = None

    def _recover(self) -> None:
        logger.warning(
            "Capture unavailable, waiting for a new stable window",
            extra={"extra_payload": {"source": self.source.name}},
        )
        self.tracker.reset()
        self.detector.reset()
        self._next_countdown_at = None

    def _publish(self) -> None:
        update = build_status(self.tracker.state, self.scheduler.state, self.config, has_reading=self._has_reading)
        self.last_status = update
        for observer in self.observers:
            try:
                observer(update)
            except Exception:
                logger.exception("Status observer failed")
