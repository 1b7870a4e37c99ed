import logging
from datetime import datetime, timezone
from typing import List, Optional
from uuid import UUID

from sqlalchemy.orm import Session

from .models import MeasurementRecord
from .schemas import MEASUREMENT_FIELDS, BodyMeasurements

logger = logging.getLogger("core.records")


class RecordRepository:
    def __init__(self, session: Session):
        self.session = session

    def list_records(self, limit: Optional[int] = None) -> List[MeasurementRecord]:
        query = self.session.query(MeasurementRecord).order_by(
            MeasurementRecord.recorded_at.desc(), MeasurementRecord.created_at.desc()
        )
        if limit:
            query = query.limit(limit)
        return query.all()

    def get(self, record_id: UUID) -> Optional[MeasurementRecord]:
        return self.session.get(MeasurementRecord, record_id)

    def save(
        self,
        name: str,
        measurements: BodyMeasurements,
        recorded_at: Optional[datetime] = None,
    ) -> List[MeasurementRecord]:
        """Store a named record and return the full history, newest first."""
        values = {field: getattr(measurements, field) for field in MEASUREMENT_FIELDS}
        record = MeasurementRecord(
            name=name,
            recorded_at=recorded_at or datetime.now(timezone.utc),
            unit=measurements.unit,
            **values,
        )
        self.session.add(record)
        try:
            self.session.commit()
        except Exception:
            self.session.rollback()
            logger.exception("Failed to save measurement record", extra={"extra_payload": {"name": name}})
            raise
        logger.info(
            "Saved measurement record",
            extra={"extra_payload": {"record_id": str(record.id), "name": name}},
        )
        return self.list_records()

    def delete(self, record_id: UUID) -> bool:
        record = self.get(record_id)
        if not record:
            return False
        self.session.delete(record)
        self.session.commit()
        return True

    def count(self) -> int:
        return self.session.query(MeasurementRecord).count()
