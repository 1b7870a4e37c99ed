from typing import Optional

import numpy as np
import pytest

from TailoT_processor.capture.video_source import VideoSource
from TailoT_processor.errors import DeviceUnavailable

FULL_SHAPE = (480, 640, 3)


def solid(value: int, shape=FULL_SHAPE) -> np.ndarray:
    return np.full(shape, value, dtype=np.uint8)


class FakeVideoSource(VideoSource):
    """Serves whatever frame the test last put on screen."""

    def __init__(self, frame: Optional[np.ndarray] = None, fail_open: bool = False, name: str = "fake") -> None:
        self.current = frame
        self.fail_open = fail_open
        self.name = name
        self.opened = False
        self.released = False
        self.reads = 0

    def show(self, frame: Optional[np.ndarray]) -> None:
        self.current = frame

    def open(self) -> None:
        if self.fail_open:
            raise DeviceUnavailable("permission denied")
        self.opened = True

    def read(self) -> Optional[np.ndarray]:
        if not self.opened:
            return None
        self.reads += 1
        return self.current

    def release(self) -> None:
        self.opened = False
        self.released = True

    @property
    def is_open(self) -> bool:
        return self.opened


@pytest.fixture
def fake_source() -> FakeVideoSource:
    return FakeVideoSource(solid(100))


@pytest.fixture
def clean_db():
    from tt_core.db import engine
    from tt_core.models import Base

    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def frame():
    return solid


@pytest.fixture
def make_source():
    return FakeVideoSource
