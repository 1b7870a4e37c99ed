from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    db_uri: str = Field("sqlite:///./tailotelligent.db", validation_alias="DATABASE_URL")
    db_echo: bool = Field(False, validation_alias="DB_ECHO")
    db_pool_size: int = Field(5, validation_alias="DB_POOL_SIZE")
    db_max_overflow: int = Field(10, validation_alias="DB_MAX_OVERFLOW")

    @field_validator("db_uri", mode="before")
    @classmethod
    def _normalize_uri(cls, value: str) -> str:
        # Heroku-style URLs still use the legacy scheme name.
        if isinstance(value, str) and value.startswith("postgres://"):
            return "postgresql://" + value[len("postgres://"):]
        return value

    @property
    def is_sqlite(self) -> bool:
        return self.db_uri.startswith("sqlite")


@lru_cache()
def get_db_settings() -> DatabaseSettings:
    return DatabaseSettings()
