import argparse
import json
import logging
import signal
import sys
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError

from tt_core.db import get_session, init_db
from tt_core.records import RecordRepository
from tt_core.schemas import BodyMeasurements, MeasurementRecordSchema

from .capture.video_source import parse_video_source
from .config.settings import ProcessorSettings
from .dto import CapturedImage
from .errors import AnalysisFailed, CaptureUnavailable, DeviceUnavailable
from .logging_utils import configure_logging
from .measurement.gemini_client import MeasurementClient, MeasurementSettings
from .pipeline.session import CaptureSession
from .pipeline.status import LoggingStatusObserver

logger = logging.getLogger("processor.main")


@dataclass
class MeasurementOutcome:
    image: Optional[CapturedImage]
    measurements: Optional[BodyMeasurements] = None
    records: List[MeasurementRecordSchema] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.image is not None and self.error is None


def run_measurement(
    session: CaptureSession,
    client: Optional[MeasurementClient],
    name: Optional[str] = None,
    timeout: Optional[float] = None,
) -> MeasurementOutcome:
    """Capture one still, analyze it, and optionally save it as a named record."""
    with session:
        image = session.run(timeout=timeout)
    if image is None:
        return MeasurementOutcome(image=None, error="No image captured")
    if client is None:
        return MeasurementOutcome(image=image)

    try:
        measurements = client.analyze(image)
    except AnalysisFailed as exc:
        logger.error("Failed to analyze image", extra={"extra_payload": {"error": str(exc)}})
        return MeasurementOutcome(image=image, error=str(exc))

    outcome = MeasurementOutcome(image=image, measurements=measurements)
    if name:
        try:
            with get_session() as db:
                rows = RecordRepository(db).save(name, measurements)
                outcome.records = [MeasurementRecordSchema.from_row(row) for row in rows]
        except SQLAlchemyError as exc:
            outcome.error = f"Failed to save record: {exc}"
    return outcome


def _listen_for_manual_trigger(session: CaptureSession) -> None:
    for _line in sys.stdin:
        if session.stop_event.is_set():
            return
        try:
            session.trigger_manual()
            return
        except CaptureUnavailable:
            logger.warning("Manual capture failed, press Enter to retry")
        except RuntimeError:
            return


def main() -> int:
    parser = argparse.ArgumentParser(description="Capture a still once the subject holds steady, then measure it.")
    parser.add_argument("--source", default=None, help="Camera index, stream URL or image folder (default: env CAMERA_SOURCE).")
    parser.add_argument("--name", default=None, help="Save the measurements under this name.")
    parser.add_argument("--output", default=None, help="Also write the captured JPEG to this path.")
    parser.add_argument("--timeout", type=float, default=None, help="Give up after this many seconds.")
    parser.add_argument("--no-analyze", action="store_true", help="Only capture; skip the measurement service.")
    args = parser.parse_args()

    configure_logging()
    settings = ProcessorSettings()
    init_db()

    client = None
    if not args.no_analyze:
        try:
            client = MeasurementClient(MeasurementSettings.from_processor(settings))
        except ValueError as exc:
            raise SystemExit(str(exc))

    source = parse_video_source(args.source or settings.camera_source, settings.camera_width, settings.camera_height)
    session = CaptureSession(source, settings.to_capture_config(), observers=[LoggingStatusObserver()])

    def _handle_shutdown(*_args) -> None:
        session.cancel()

    signal.signal(signal.SIGINT, _handle_shutdown)
    if hasattr(signal, "SIGTERM"):
        signal.signal(signal.SIGTERM, _handle_shutdown)
    threading.Thread(target=_listen_for_manual_trigger, args=(session,), daemon=True).start()

    try:
        outcome = run_measurement(session, client, name=args.name, timeout=args.timeout)
    except DeviceUnavailable as exc:
        logger.error("Unable to access camera", extra={"extra_payload": {"error": str(exc)}})
        return 2

    if outcome.image is not None and args.output:
        Path(args.output).write_bytes(outcome.image.image_bytes)
    if outcome.measurements is not None:
        print(json.dumps(outcome.measurements.model_dump(mode="json"), indent=2))
    return 0 if outcome.ok else 1


if __name__ == "__main__":
    sys.exit(main())
