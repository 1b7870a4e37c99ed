import logging
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session

from tt_core.records import RecordRepository
from tt_core.schemas import MeasurementRecordCreate, MeasurementRecordSchema

from ..core.config import get_settings
from ..dependencies import db_dep

logger = logging.getLogger("api.records")

router = APIRouter(prefix="/records", tags=["records"])


@router.get("", response_model=List[MeasurementRecordSchema])
def list_records(limit: int | None = None, db: Session = Depends(db_dep)):
    limit = limit or get_settings().history_limit
    return [MeasurementRecordSchema.from_row(row) for row in RecordRepository(db).list_records(limit)]


@router.post("", response_model=List[MeasurementRecordSchema], status_code=status.HTTP_201_CREATED)
def save_record(payload: MeasurementRecordCreate, db: Session = Depends(db_dep)):
    rows = RecordRepository(db).save(payload.name, payload.measurements, recorded_at=payload.recorded_at)
    logger.info("Record saved via API", extra={"extra_payload": {"name": payload.name, "total": len(rows)}})
    return [MeasurementRecordSchema.from_row(row) for row in rows]


@router.get("/{record_id}", response_model=MeasurementRecordSchema)
def get_record(record_id: UUID, db: Session = Depends(db_dep)):
    row = RecordRepository(db).get(record_id)
    if not row:
        raise HTTPException(status_code=404, detail="Record not found")
    return MeasurementRecordSchema.from_row(row)


@router.delete("/{record_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_record(record_id: UUID, db: Session = Depends(db_dep)):
    if not RecordRepository(db).delete(record_id):
        raise HTTPException(status_code=404, detail="Record not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
