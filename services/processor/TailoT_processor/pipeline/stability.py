from ..dto import MotionClass, MotionReading, StabilityState


def advance_stability(state: StabilityState, reading: MotionReading, now_ms: int) -> StabilityState:
    """Next stability state from the previous one and a fresh reading."""
    if not reading.is_stable:
        return StabilityState(MotionClass.moving, 0, None)

    since = state.stable_since_ms if state.stable_since_ms is not None else now_ms
    duration = max(0, now_ms - since)
    if state.is_stable:
        # A clock step backwards must not shrink a running episode.
        duration = max(duration, state.continuous_stable_ms)
    return StabilityState(MotionClass.stable, duration, since)


class StabilityTracker:
    def __init__(self) -> None:
        self._state = StabilityState()

    @property
    def state(self) -> StabilityState:
        return self._state

    def update(self, reading: MotionReading, now_ms: int) -> StabilityState:
        self._state = advance_stability(self._state, reading, now_ms)
        return self._state

    def reset(self) -> None:
        self._state = StabilityState()
