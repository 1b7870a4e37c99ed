from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..dto import CaptureConfig


class ProcessorSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    camera_source: str = Field("0", validation_alias="CAMERA_SOURCE")
    camera_width: int = Field(1280, validation_alias="CAMERA_WIDTH")
    camera_height: int = Field(720, validation_alias="CAMERA_HEIGHT")
    motion_threshold: float = Field(30.0, validation_alias="MOTION_THRESHOLD")
    stability_required_ms: int = Field(2000, validation_alias="STABILITY_REQUIRED_MS")
    sample_width: int = Field(64, validation_alias="SAMPLE_WIDTH")
    sample_height: int = Field(48, validation_alias="SAMPLE_HEIGHT")
    countdown_steps: int = Field(3, validation_alias="COUNTDOWN_STEPS")
    countdown_interval_ms: int = Field(1000, validation_alias="COUNTDOWN_INTERVAL_MS")
    check_interval_ms: int = Field(100, validation_alias="CHECK_INTERVAL_MS")
    jpeg_quality: float = Field(0.9, validation_alias="JPEG_QUALITY")
    cancel_countdown_on_motion: bool = Field(False, validation_alias="CANCEL_COUNTDOWN_ON_MOTION")
    gemini_api_key: Optional[str] = Field(None, validation_alias="GEMINI_API_KEY")
    gemini_model: str = Field("gemini-2.5-flash", validation_alias="GEMINI_MODEL")
    gemini_base_url: str = Field(
        "https://generativelanguage.googleapis.com/v1beta", validation_alias="GEMINI_BASE_URL"
    )
    measurement_timeout: float = Field(60.0, validation_alias="MEASUREMENT_TIMEOUT")

    def to_capture_config(self) -> CaptureConfig:
        return CaptureConfig(
            motion_threshold=self.motion_threshold,
            stability_required_ms=self.stability_required_ms,
            sample_width=self.sample_width,
            sample_height=self.sample_height,
            countdown_steps=self.countdown_steps,
            countdown_interval_ms=self.countdown_interval_ms,
            check_interval_ms=self.check_interval_ms,
            jpeg_quality=self.jpeg_quality,
            cancel_countdown_on_motion=self.cancel_countdown_on_motion,
        )
