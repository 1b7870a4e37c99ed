import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

import httpx
from pydantic import ValidationError

from tt_core.schemas import BodyMeasurements

from ..config.settings import ProcessorSettings
from ..dto import CapturedImage
from ..errors import AnalysisFailed

logger = logging.getLogger("processor.measurement")

MEASUREMENT_PROMPT = """
Analyze the person in this image for tailoring purposes.
Based on standard anthropometric ratios and the visible proportions of the person, estimate the following body measurements.

Assume an average adult height if exact reference is missing, or deduce from background cues if possible.
Provide realistic estimates for a tailor.

Return the result in JSON format with numeric values in centimeters (cm).
"""

_FIELD_DESCRIPTIONS = {
    "neck": "Neck circumference in cm",
    "shoulders": "Shoulder width in cm",
    "chest": "Chest circumference in cm",
    "waist": "Waist circumference in cm",
    "hips": "Hip circumference in cm",
    "sleeve": "Sleeve length in cm",
    "inseam": "Inseam length in cm",
    "heightEstimate": "Estimated total height in cm",
}

RESPONSE_SCHEMA: Dict[str, Any] = {
    "type": "OBJECT",
    "properties": {name: {"type": "NUMBER", "description": text} for name, text in _FIELD_DESCRIPTIONS.items()},
    "required": list(_FIELD_DESCRIPTIONS),
}


@dataclass
class MeasurementSettings:
    api_key: str
    model: str = "gemini-2.5-flash"
    base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    timeout: float = 60.0

    @classmethod
    def from_processor(cls, settings: ProcessorSettings) -> "MeasurementSettings":
        if not settings.gemini_api_key:
            raise ValueError("GEMINI_API_KEY is not configured")
        return cls(
            api_key=settings.gemini_api_key,
            model=settings.gemini_model,
            base_url=settings.gemini_base_url,
            timeout=settings.measurement_timeout,
        )


class MeasurementClient:
    """Turns one captured still into body measurements via Gemini generateContent."""

    def __init__(self, settings: MeasurementSettings, transport: Optional[httpx.BaseTransport] = None) -> None:
        self.settings = settings
        self.url = f"{settings.base_url.rstrip('/')}/models/{settings.model}:generateContent"
        self._transport = transport

    def build_payload(self, image: CapturedImage) -> Dict[str, Any]:
        return {
            "contents": [
                {
                    "parts": [
                        {"inlineData": {"mimeType": image.mime_type, "data": image.to_base64()}},
                        {"text": MEASUREMENT_PROMPT},
                    ]
                }
            ],
            "generationConfig": {
                "responseMimeType": "application/json",
                "responseSchema": RESPONSE_SCHEMA,
            },
        }

    def analyze(self, image: CapturedImage) -> BodyMeasurements:
        headers = {"x-goog-api-key": self.settings.api_key}
        try:
            with httpx.Client(timeout=self.settings.timeout, transport=self._transport) as client:
                resp = client.post(self.url, json=self.build_payload(image), headers=headers)
                resp.raise_for_status()
                body = resp.json()
        except httpx.HTTPStatusError as exc:
            logger.error(
                "Measurement service returned an error",
                extra={"extra_payload": {"status": exc.response.status_code, "model": self.settings.model}},
            )
            raise AnalysisFailed(f"Measurement service error: HTTP {exc.response.status_code}") from exc
        except (httpx.HTTPError, ValueError) as exc:
            logger.error("Measurement request failed", extra={"extra_payload": {"error": str(exc)}})
            raise AnalysisFailed(f"Measurement request failed: {exc}") from exc

        text = self._extract_text(body)
        if not text:
            raise AnalysisFailed("No response from measurement service")
        try:
            data = json.loads(text)
            measurements = BodyMeasurements.model_validate({**data, "unit": "cm"})
        except (ValueError, TypeError, ValidationError) as exc:
            logger.error("Unparseable measurement response", extra={"extra_payload": {"error": str(exc)}})
            raise AnalysisFailed("Measurement service returned an invalid result") from exc

        logger.info(
            "Measurements received",
            extra={"extra_payload": {"model": self.settings.model, "height_estimate": measurements.height_estimate}},
        )
        return measurements

    @staticmethod
    def _extract_text(body: Any) -> Optional[str]:
        try:
            parts = body["candidates"][0]["content"]["parts"]
        except (KeyError, IndexError, TypeError):
            return None
        texts = [part.get("text", "") for part in parts if isinstance(part, dict)]
        return "".join(texts) or None
