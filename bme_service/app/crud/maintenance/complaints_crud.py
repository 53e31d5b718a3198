# app/crud/maintenance/complaints_crud.py
import logging
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy import func, or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from shared.core.exceptions import NotFoundError
from ...enum.asset_enum import HistoryEventType
from ...enum.maintenance_enum import ComplaintPriority, ComplaintStatus
from ...models.assets.assets import Asset
from ...models.maintenance.complaints import Complaint
from ...schemas.maintenance.complaints_schemas import (
    ComplaintCreate,
    ComplaintListResponse,
    ComplaintOut,
    ComplaintRequest,
    ComplaintUpdate,
)
from ..assets.asset_history_crud import create_asset_history
from ..common.asset_enrichment import enrich_with_asset, enrich_with_assets
from ..common.id_generator import generate_prefixed_id

logger = logging.getLogger(__name__)

SLA_HOURS = {
    ComplaintPriority.critical: 2,
    ComplaintPriority.high: 4,
    ComplaintPriority.medium: 8,
    ComplaintPriority.low: 24,
}

CLOSING_STATUSES = {ComplaintStatus.resolved.value, ComplaintStatus.closed.value}


def calculate_sla_deadline(priority: ComplaintPriority, reported_at: Optional[datetime] = None) -> datetime:
    reported_at = reported_at or datetime.utcnow()
    return reported_at + timedelta(hours=SLA_HOURS[ComplaintPriority(priority)])


def _get_complaint_or_404(db: Session, complaint_id: str) -> Complaint:
    complaint = db.query(Complaint).filter(Complaint.id == complaint_id).first()
    if not complaint:
        raise NotFoundError("Complaint not found")
    return complaint


def get_complaints(db: Session, asset_db: Session, params: ComplaintRequest) -> ComplaintListResponse:
    query = db.query(Complaint)

    if params.status and params.status.lower() != "all":
        query = query.filter(Complaint.status == params.status)
    if params.priority and params.priority.lower() != "all":
        query = query.filter(Complaint.priority == params.priority)
    if params.asset_tag:
        query = query.filter(Complaint.asset_tag == params.asset_tag)
    if params.reported_by:
        query = query.filter(Complaint.reported_by == params.reported_by)
    if params.assigned_to:
        query = query.filter(Complaint.assigned_to == params.assigned_to)
    if params.search:
        search_term = f"%{params.search}%"
        query = query.filter(or_(Complaint.id.ilike(search_term),
                                 Complaint.title.ilike(search_term)))

    total = query.with_entities(func.count(Complaint.id)).scalar()
    rows = (
        query
        .order_by(Complaint.reported_at.desc())
        .offset(params.skip)
        .limit(params.limit)
        .all()
    )

    return ComplaintListResponse(
        complaints=[ComplaintOut.model_validate(item)
                    for item in enrich_with_assets(asset_db, rows)],
        total=total,
    )


def get_complaint(db: Session, asset_db: Session, complaint_id: str) -> ComplaintOut:
    complaint = _get_complaint_or_404(db, complaint_id)
    return ComplaintOut.model_validate(enrich_with_asset(asset_db, complaint))


def create_complaint(
    db: Session,
    asset_db: Session,
    complaint: ComplaintCreate,
    reported_by: Optional[str] = None,
) -> ComplaintOut:
    if complaint.asset_tag:
        exists = asset_db.query(Asset.id).filter(
            Asset.tag == complaint.asset_tag).first()
        if not exists:
            raise NotFoundError(f"Asset with ID {complaint.asset_tag} not found")

    now = datetime.utcnow()
    db_complaint = Complaint(
        id=complaint.id or generate_prefixed_id(db, Complaint.id, "COMP"),
        asset_tag=complaint.asset_tag,
        title=complaint.title,
        description=complaint.description,
        priority=complaint.priority.value,
        status=ComplaintStatus.open.value,
        reported_by=complaint.reported_by or reported_by,
        assigned_to=complaint.assigned_to,
        reported_at=now,
        sla_deadline=calculate_sla_deadline(complaint.priority, now),
    )
    db.add(db_complaint)
    db.commit()
    db.refresh(db_complaint)
    logger.info("Complaint %s raised for asset %s",
                db_complaint.id, db_complaint.asset_tag)

    if db_complaint.asset_tag:
        try:
            create_asset_history(
                asset_db, db_complaint.asset_tag, HistoryEventType.complaint,
                description=f"Complaint {db_complaint.id} raised: {db_complaint.title}",
                performed_by=db_complaint.reported_by,
                metadata={"complaint_id": db_complaint.id,
                          "priority": db_complaint.priority},
            )
        except SQLAlchemyError:
            asset_db.rollback()
            logger.exception(
                "Failed to record complaint history for %s", db_complaint.id)

    return ComplaintOut.model_validate(enrich_with_asset(asset_db, db_complaint))


def update_complaint(
    db: Session,
    asset_db: Session,
    complaint_id: str,
    complaint: ComplaintUpdate,
) -> ComplaintOut:
    db_complaint = _get_complaint_or_404(db, complaint_id)
    update_data = complaint.model_dump(exclude_unset=True)
    now = datetime.utcnow()

    new_status = update_data.pop("status", None)
    if new_status is not None:
        new_status = ComplaintStatus(new_status).value
        if new_status == ComplaintStatus.in_progress.value and not db_complaint.responded_at:
            db_complaint.responded_at = update_data.pop("responded_at", None) or now
        if new_status in CLOSING_STATUSES and not db_complaint.resolved_at:
            db_complaint.resolved_at = now
        db_complaint.status = new_status

    new_priority = update_data.pop("priority", None)
    if new_priority is not None and ComplaintPriority(new_priority).value != db_complaint.priority:
        db_complaint.priority = ComplaintPriority(new_priority).value
        db_complaint.sla_deadline = calculate_sla_deadline(
            new_priority, db_complaint.reported_at)

    for field, value in update_data.items():
        setattr(db_complaint, field, value)

    db.commit()
    db.refresh(db_complaint)
    return ComplaintOut.model_validate(enrich_with_asset(asset_db, db_complaint))
