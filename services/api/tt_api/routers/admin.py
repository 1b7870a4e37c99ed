from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from tt_core.records import RecordRepository

from ..dependencies import db_dep

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("/health")
def health() -> dict:
    return {"status": "ok"}


@router.get("/metrics")
def metrics(db: Session = Depends(db_dep)) -> dict:
    return {"records": RecordRepository(db).count()}
