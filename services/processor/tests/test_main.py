import json

import httpx

from tt_core.db import get_session
from tt_core.records import RecordRepository

from TailoT_processor.dto import CaptureConfig
from TailoT_processor.main import run_measurement
from TailoT_processor.measurement.gemini_client import MeasurementClient, MeasurementSettings
from TailoT_processor.pipeline.session import CaptureSession

FAST = CaptureConfig(check_interval_ms=5, stability_required_ms=10, countdown_steps=1, countdown_interval_ms=10)

MEASUREMENTS = {
    "neck": 37.0,
    "shoulders": 44.0,
    "chest": 95.0,
    "waist": 80.0,
    "hips": 97.0,
    "sleeve": 61.0,
    "inseam": 79.0,
    "heightEstimate": 172.0,
}


def client_returning(status, payload):
    def handler(request):
        return httpx.Response(status, json=payload)

    return MeasurementClient(MeasurementSettings(api_key="k"), transport=httpx.MockTransport(handler))


def ok_client():
    return client_returning(200, {"candidates": [{"content": {"parts": [{"text": json.dumps(MEASUREMENTS)}]}}]})


def test_capture_analyze_and_save(make_source, frame, clean_db):
    source = make_source(frame(100))
    outcome = run_measurement(CaptureSession(source, FAST), ok_client(), name="Alex", timeout=5)

    assert outcome.ok
    assert outcome.measurements.waist == 80.0
    assert [r.name for r in outcome.records] == ["Alex"]
    assert source.released
    with get_session() as db:
        assert RecordRepository(db).count() == 1


def test_analysis_failure_saves_nothing(make_source, frame, clean_db):
    source = make_source(frame(100))
    outcome = run_measurement(CaptureSession(source, FAST), client_returning(500, {}), name="Alex", timeout=5)

    assert not outcome.ok
    assert outcome.image is not None
    assert outcome.measurements is None
    with get_session() as db:
        assert RecordRepository(db).count() == 0


def test_capture_only_without_client(make_source, frame):
    outcome = run_measurement(CaptureSession(make_source(frame(100)), FAST), None, timeout=5)
    assert outcome.ok
    assert outcome.measurements is None


def test_cancelled_session_reports_no_image(make_source, frame):
    session = CaptureSession(make_source(frame(100)), FAST)
    session.cancel()
    outcome = run_measurement(session, ok_client(), timeout=5)
    assert outcome.image is None
    assert not outcome.ok
