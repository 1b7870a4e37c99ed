from functools import lru_cache
from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class APISettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    app_name: str = "TailoTelligent API"
    allowed_origins_raw: str = Field("*", validation_alias="CORS_ORIGINS")
    history_limit: int = Field(100, validation_alias="HISTORY_LIMIT")

    @property
    def allowed_origins(self) -> List[str]:
        return [item.strip() for item in self.allowed_origins_raw.split(",") if item.strip()]


@lru_cache()
def get_settings() -> APISettings:
    return APISettings()
