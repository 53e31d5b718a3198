# app/crud/maintenance/calibration_crud.py
import logging
from datetime import date, datetime, time, timedelta
from typing import List, Optional

from dateutil.relativedelta import relativedelta
from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from shared.core.exceptions import NotFoundError, ValidationError
from ...enum.asset_enum import HistoryEventType
from ...enum.maintenance_enum import CalibrationStatus
from ...models.assets.assets import Asset
from ...models.maintenance.calibrations import Calibration
from ...schemas.maintenance.calibration_schemas import (
    CalibrationComplete,
    CalibrationCreate,
    CalibrationListResponse,
    CalibrationOut,
    CalibrationRequest,
    CalibrationSchedule,
)
from ..assets.asset_history_crud import create_asset_history
from ..common.asset_enrichment import enrich_with_asset, enrich_with_assets

logger = logging.getLogger(__name__)

CALIBRATION_CYCLE_MONTHS = 12
OPEN_STATUSES = (CalibrationStatus.scheduled.value,
                 CalibrationStatus.in_progress.value)


def next_due_after(calibration_date: date) -> date:
    return calibration_date + relativedelta(months=CALIBRATION_CYCLE_MONTHS)


def _get_asset_or_404(asset_db: Session, tag: str) -> Asset:
    asset = asset_db.query(Asset).filter(Asset.tag == tag).first()
    if not asset:
        raise NotFoundError(f"Asset with ID {tag} not found")
    return asset


def _get_calibration_or_404(db: Session, calibration_id: str) -> Calibration:
    calibration = db.query(Calibration).filter(
        Calibration.id == calibration_id).first()
    if not calibration:
        raise NotFoundError("Calibration not found")
    return calibration


def _to_out(asset_db: Session, calibration: Calibration) -> CalibrationOut:
    return CalibrationOut.model_validate(enrich_with_asset(asset_db, calibration))


def _set_next_calibration_date(asset: Asset, asset_db: Session, due: date):
    asset.next_calibration_date = due
    asset_db.commit()


def calculate_next_due_date(db: Session, tag: str) -> Optional[date]:
    """Last recorded calibration for ``tag`` plus one cycle, None without history."""
    last = (
        db.query(Calibration)
        .filter(Calibration.asset_tag == tag)
        .order_by(Calibration.calibration_date.desc())
        .first()
    )
    if not last:
        return None
    return next_due_after(last.calibration_date)


def _record_calibration_event(asset_db: Session, calibration: Calibration,
                              performed_by: Optional[str]):
    try:
        create_asset_history(
            asset_db, calibration.asset_tag, HistoryEventType.calibration,
            description="Calibration completed",
            performed_by=performed_by,
            new_value=calibration.next_due_date,
            event_date=datetime.combine(calibration.calibration_date, time.min),
            metadata={"calibration_id": calibration.id,
                      "next_due_date": calibration.next_due_date,
                      "certificate_url": calibration.certificate_url},
        )
    except NotFoundError:
        logger.warning("Calibration %s recorded for unknown asset %s",
                       calibration.id, calibration.asset_tag)
    except SQLAlchemyError:
        asset_db.rollback()
        logger.exception(
            "Failed to record calibration history for %s", calibration.id)


# ----------------------------------------------------------------------
# CRUD OPERATIONS
# ----------------------------------------------------------------------

def get_calibrations(db: Session, asset_db: Session, params: CalibrationRequest) -> CalibrationListResponse:
    query = db.query(Calibration)

    if params.status and params.status.lower() != "all":
        query = query.filter(Calibration.status == params.status)
    if params.asset_tag:
        query = query.filter(Calibration.asset_tag == params.asset_tag)
    if params.search:
        query = query.filter(Calibration.asset_tag.ilike(f"%{params.search}%"))

    total = query.with_entities(func.count(Calibration.id)).scalar()
    rows = (
        query
        .order_by(Calibration.next_due_date.asc())
        .offset(params.skip)
        .limit(params.limit)
        .all()
    )
    return CalibrationListResponse(
        calibrations=[CalibrationOut.model_validate(item)
                      for item in enrich_with_assets(asset_db, rows)],
        total=total,
    )


def get_calibration(db: Session, asset_db: Session, calibration_id: str) -> CalibrationOut:
    return _to_out(asset_db, _get_calibration_or_404(db, calibration_id))


def create_calibration(db: Session, asset_db: Session, request: CalibrationCreate) -> CalibrationOut:
    asset = _get_asset_or_404(asset_db, request.asset_tag)
    next_due = request.next_due_date or next_due_after(request.calibration_date)
    if next_due <= request.calibration_date:
        raise ValidationError("Next due date must be after calibration date")

    db_calibration = Calibration(
        asset_tag=request.asset_tag,
        calibration_date=request.calibration_date,
        next_due_date=next_due,
        vendor_id=request.vendor_id,
        certificate_url=request.certificate_url,
        status=request.status.value,
        notes=request.notes,
    )
    db.add(db_calibration)
    db.commit()
    db.refresh(db_calibration)

    _set_next_calibration_date(asset, asset_db, next_due)
    if db_calibration.status == CalibrationStatus.completed.value:
        _record_calibration_event(asset_db, db_calibration, request.performed_by)

    logger.info("Calibration %s recorded for asset %s, next due %s",
                db_calibration.id, db_calibration.asset_tag, next_due)
    return _to_out(asset_db, db_calibration)


def schedule_calibration(db: Session, asset_db: Session, request: CalibrationSchedule) -> CalibrationOut:
    asset = _get_asset_or_404(asset_db, request.asset_tag)
    next_due = calculate_next_due_date(db, request.asset_tag) \
        or next_due_after(request.scheduled_date)

    db_calibration = Calibration(
        asset_tag=request.asset_tag,
        calibration_date=request.scheduled_date,
        next_due_date=next_due,
        vendor_id=request.vendor_id,
        status=CalibrationStatus.scheduled.value,
    )
    db.add(db_calibration)
    db.commit()
    db.refresh(db_calibration)

    _set_next_calibration_date(asset, asset_db, next_due)
    logger.info("Calibration scheduled for asset %s on %s",
                request.asset_tag, request.scheduled_date)
    return _to_out(asset_db, db_calibration)


def complete_calibration(
    db: Session,
    asset_db: Session,
    calibration_id: str,
    request: CalibrationComplete,
) -> CalibrationOut:
    db_calibration = _get_calibration_or_404(db, calibration_id)
    if db_calibration.status in (CalibrationStatus.completed.value,
                                 CalibrationStatus.expired.value):
        raise ValidationError(f"Calibration is already {db_calibration.status}")

    completed = request.completed_date or date.today()
    db_calibration.status = CalibrationStatus.completed.value
    db_calibration.calibration_date = completed
    db_calibration.next_due_date = next_due_after(completed)
    if request.certificate_url is not None:
        db_calibration.certificate_url = request.certificate_url
    if request.notes is not None:
        db_calibration.notes = request.notes
    db.commit()
    db.refresh(db_calibration)

    asset = asset_db.query(Asset).filter(
        Asset.tag == db_calibration.asset_tag).first()
    if asset:
        _set_next_calibration_date(asset, asset_db, db_calibration.next_due_date)
    _record_calibration_event(asset_db, db_calibration, request.performed_by)

    return _to_out(asset_db, db_calibration)


def get_upcoming_calibrations(db: Session, asset_db: Session, days: int = 30) -> List[CalibrationOut]:
    today = date.today()
    rows = (
        db.query(Calibration)
        .filter(
            Calibration.status.in_(OPEN_STATUSES),
            Calibration.next_due_date >= today,
            Calibration.next_due_date <= today + timedelta(days=days),
        )
        .order_by(Calibration.next_due_date.asc())
        .all()
    )
    return [CalibrationOut.model_validate(item)
            for item in enrich_with_assets(asset_db, rows)]


def get_overdue_calibrations(db: Session, asset_db: Session) -> List[CalibrationOut]:
    rows = (
        db.query(Calibration)
        .filter(
            Calibration.status.in_(
                OPEN_STATUSES + (CalibrationStatus.overdue.value,)),
            Calibration.next_due_date < date.today(),
        )
        .order_by(Calibration.next_due_date.asc())
        .all()
    )
    return [CalibrationOut.model_validate(item)
            for item in enrich_with_assets(asset_db, rows)]


def mark_overdue_calibrations(db: Session) -> int:
    updated = (
        db.query(Calibration)
        .filter(Calibration.status.in_(OPEN_STATUSES),
                Calibration.next_due_date < date.today())
        .update({Calibration.status: CalibrationStatus.overdue.value},
                synchronize_session=False)
    )
    if updated:
        db.commit()
        logger.info("%d calibrations marked overdue", updated)
    return updated
