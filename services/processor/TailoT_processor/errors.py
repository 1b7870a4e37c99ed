class CaptureError(Exception):
    """Base class for failures surfaced by a capture session."""


class DeviceUnavailable(CaptureError):
    """The video source could not be acquired; the session cannot start."""


class CaptureUnavailable(CaptureError):
    """No valid frame was ready at capture time. Retryable."""


class AnalysisFailed(CaptureError):
    """The measurement service could not turn the still into measurements."""
