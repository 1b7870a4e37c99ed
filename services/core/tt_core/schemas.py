from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from .models import MeasurementRecord, MeasurementUnit

MEASUREMENT_FIELDS = ("neck", "shoulders", "chest", "waist", "hips", "sleeve", "inseam", "height_estimate")


class BodyMeasurements(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    neck: float = Field(ge=0)
    shoulders: float = Field(ge=0)
    chest: float = Field(ge=0)
    waist: float = Field(ge=0)
    hips: float = Field(ge=0)
    sleeve: float = Field(ge=0)
    inseam: float = Field(ge=0)
    height_estimate: float = Field(ge=0, validation_alias=AliasChoices("height_estimate", "heightEstimate"))
    unit: MeasurementUnit = MeasurementUnit.cm


class MeasurementRecordCreate(BaseModel):
    name: str = Field(max_length=255)
    measurements: BodyMeasurements
    recorded_at: Optional[datetime] = None

    @field_validator("name")
    @classmethod
    def _strip_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("name must not be blank")
        return value


class MeasurementRecordSchema(BaseModel):
    id: UUID
    name: str
    recorded_at: datetime
    measurements: BodyMeasurements
    created_at: Optional[datetime] = None

    @classmethod
    def from_row(cls, row: MeasurementRecord) -> "MeasurementRecordSchema":
        return cls(
            id=row.id,
            name=row.name,
            recorded_at=row.recorded_at,
            measurements=BodyMeasurements.model_validate(row),
            created_at=row.created_at,
        )
