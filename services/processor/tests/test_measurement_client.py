import base64
import json

import httpx
import pytest

from TailoT_processor.config.settings import ProcessorSettings
from TailoT_processor.dto import CapturedImage
from TailoT_processor.errors import AnalysisFailed
from TailoT_processor.measurement.gemini_client import MeasurementClient, MeasurementSettings

MEASUREMENTS = {
    "neck": 38.0,
    "shoulders": 46.5,
    "chest": 98.0,
    "waist": 84.0,
    "hips": 100.0,
    "sleeve": 63.0,
    "inseam": 81.0,
    "heightEstimate": 178.0,
}

IMAGE = CapturedImage(image_bytes=b"\xff\xd8fake-jpeg")


def gemini_body(text):
    return {"candidates": [{"content": {"parts": [{"text": text}], "role": "model"}}]}


def make_client(handler):
    settings = MeasurementSettings(api_key="test-key", base_url="https://gemini.test/v1beta")
    return MeasurementClient(settings, transport=httpx.MockTransport(handler))


def test_analyze_parses_measurements_and_sends_image():
    captured = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["url"] = str(request.url)
        captured["key"] = request.headers.get("x-goog-api-key")
        captured["body"] = json.loads(request.content)
        return httpx.Response(200, json=gemini_body(json.dumps(MEASUREMENTS)))

    result = make_client(handler).analyze(IMAGE)

    assert result.chest == 98.0
    assert result.height_estimate == 178.0
    assert result.unit.value == "cm"
    assert captured["url"] == "https://gemini.test/v1beta/models/gemini-2.5-flash:generateContent"
    assert captured["key"] == "test-key"
    parts = captured["body"]["contents"][0]["parts"]
    assert base64.b64decode(parts[0]["inlineData"]["data"]) == IMAGE.image_bytes
    assert parts[0]["inlineData"]["mimeType"] == "image/jpeg"
    schema = captured["body"]["generationConfig"]["responseSchema"]
    assert set(schema["required"]) == set(MEASUREMENTS)


def test_http_error_becomes_analysis_failed():
    client = make_client(lambda request: httpx.Response(503, json={"error": {"message": "overloaded"}}))
    with pytest.raises(AnalysisFailed, match="503"):
        client.analyze(IMAGE)


def test_transport_error_becomes_analysis_failed():
    def handler(request):
        raise httpx.ConnectError("unreachable", request=request)

    with pytest.raises(AnalysisFailed):
        make_client(handler).analyze(IMAGE)


def test_empty_response_becomes_analysis_failed():
    client = make_client(lambda request: httpx.Response(200, json={"candidates": []}))
    with pytest.raises(AnalysisFailed, match="No response"):
        client.analyze(IMAGE)


@pytest.mark.parametrize(
    "text",
    [
        "not json",
        json.dumps({k: v for k, v in MEASUREMENTS.items() if k != "waist"}),
        json.dumps({**MEASUREMENTS, "chest": -5}),
        json.dumps([1, 2, 3]),
    ],
)
def test_invalid_payload_becomes_analysis_failed(text):
    client = make_client(lambda request: httpx.Response(200, json=gemini_body(text)))
    with pytest.raises(AnalysisFailed):
        client.analyze(IMAGE)


def test_settings_require_api_key():
    with pytest.raises(ValueError):
        MeasurementSettings.from_processor(ProcessorSettings(_env_file=None, gemini_api_key=None))
    settings = MeasurementSettings.from_processor(ProcessorSettings(_env_file=None, gemini_api_key="k"))
    assert settings.api_key == "k"
