# app/crud/maintenance/pm_crud.py
import logging
from datetime import datetime
from typing import Any, Dict, Optional

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from shared.core.exceptions import NotFoundError, ValidationError
from ...enum.asset_enum import HistoryEventType
from ...enum.maintenance_enum import PMStatus
from ...models.assets.assets import Asset
from ...models.maintenance.preventive_maintenance import PreventiveMaintenance
from ...schemas.maintenance.pm_schemas import (
    PMComplete,
    PMCreate,
    PMListResponse,
    PMOut,
    PMRequest,
)
from ..assets.asset_history_crud import create_asset_history
from ..common.asset_enrichment import enrich_with_asset, enrich_with_assets

logger = logging.getLogger(__name__)


def derive_pm_status(item: Dict[str, Any], now: Optional[datetime] = None) -> Dict[str, Any]:
    """Scheduled rows whose date has passed are reported as Overdue."""
    now = now or datetime.utcnow()
    if item.get("status") == PMStatus.scheduled.value and item["scheduled_date"] < now:
        item["status"] = PMStatus.overdue.value
    return item


def _get_pm_or_404(db: Session, pm_id: str) -> PreventiveMaintenance:
    pm = db.query(PreventiveMaintenance).filter(
        PreventiveMaintenance.id == pm_id).first()
    if not pm:
        raise NotFoundError("Preventive maintenance not found")
    return pm


def overdue_filter(now: Optional[datetime] = None):
    now = now or datetime.utcnow()
    return (
        PreventiveMaintenance.status.in_(
            [PMStatus.scheduled.value, PMStatus.overdue.value]),
        PreventiveMaintenance.scheduled_date < now,
    )


def get_pms(db: Session, asset_db: Session, params: PMRequest) -> PMListResponse:
    query = db.query(PreventiveMaintenance)

    if params.status and params.status.lower() != "all":
        if params.status == PMStatus.overdue.value:
            query = query.filter(*overdue_filter())
        else:
            query = query.filter(PreventiveMaintenance.status == params.status)
    if params.asset_tag:
        query = query.filter(PreventiveMaintenance.asset_tag == params.asset_tag)
    if params.search:
        query = query.filter(
            PreventiveMaintenance.asset_tag.ilike(f"%{params.search}%"))
    if params.date_from:
        query = query.filter(
            PreventiveMaintenance.scheduled_date >= params.date_from)
    if params.date_to:
        query = query.filter(
            PreventiveMaintenance.scheduled_date <= params.date_to)

    total = query.with_entities(func.count(PreventiveMaintenance.id)).scalar()
    rows = (
        query
        .order_by(PreventiveMaintenance.scheduled_date.asc())
        .offset(params.skip)
        .limit(params.limit)
        .all()
    )

    now = datetime.utcnow()
    return PMListResponse(
        pms=[PMOut.model_validate(derive_pm_status(item, now))
             for item in enrich_with_assets(asset_db, rows)],
        total=total,
    )


def get_pm(db: Session, asset_db: Session, pm_id: str) -> PMOut:
    pm = _get_pm_or_404(db, pm_id)
    return PMOut.model_validate(derive_pm_status(enrich_with_asset(asset_db, pm)))


def schedule_pm(db: Session, asset_db: Session, pm: PMCreate) -> PMOut:
    if not asset_db.query(Asset.id).filter(Asset.tag == pm.asset_tag).first():
        raise NotFoundError(f"Asset with ID {pm.asset_tag} not found")

    db_pm = PreventiveMaintenance(
        asset_tag=pm.asset_tag,
        scheduled_date=pm.scheduled_date,
        technician_id=pm.technician_id,
        status=PMStatus.scheduled.value,
        checklist=[item.model_dump() for item in pm.checklist],
        notes=pm.notes,
    )
    db.add(db_pm)
    db.commit()
    db.refresh(db_pm)
    logger.info("PM %s scheduled for asset %s on %s",
                db_pm.id, db_pm.asset_tag, db_pm.scheduled_date)

    return PMOut.model_validate(derive_pm_status(enrich_with_asset(asset_db, db_pm)))


def complete_pm(db: Session, asset_db: Session, pm_id: str, request: PMComplete) -> PMOut:
    db_pm = _get_pm_or_404(db, pm_id)
    if db_pm.status in (PMStatus.completed.value, PMStatus.cancelled.value):
        raise ValidationError(f"PM is already {db_pm.status}")

    db_pm.status = PMStatus.completed.value
    db_pm.completed_date = request.completed_date or datetime.utcnow()
    if request.checklist is not None:
        db_pm.checklist = [item.model_dump() for item in request.checklist]
    if request.notes is not None:
        db_pm.notes = request.notes
    db.commit()
    db.refresh(db_pm)

    try:
        create_asset_history(
            asset_db, db_pm.asset_tag, HistoryEventType.pm,
            description="Preventive maintenance completed",
            performed_by=request.performed_by or db_pm.technician_id,
            event_date=db_pm.completed_date,
            metadata={"pm_id": db_pm.id,
                      "scheduled_date": db_pm.scheduled_date},
        )
    except NotFoundError:
        logger.warning("PM %s completed for unknown asset %s",
                       db_pm.id, db_pm.asset_tag)
    except SQLAlchemyError:
        asset_db.rollback()
        logger.exception("Failed to record PM history for %s", db_pm.id)

    return PMOut.model_validate(enrich_with_asset(asset_db, db_pm))
