# app/crud/maintenance/work_order_crud.py
import logging
from datetime import datetime
from typing import Optional

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from shared.core.exceptions import NotFoundError
from ...enum.maintenance_enum import WorkOrderStatus
from ...models.maintenance.complaints import Complaint
from ...models.maintenance.work_orders import WorkOrder
from ...schemas.maintenance.work_order_schemas import (
    WorkOrderCreate,
    WorkOrderListResponse,
    WorkOrderOut,
    WorkOrderRequest,
    WorkOrderUpdate,
)
from ..common.asset_enrichment import enrich_with_asset, enrich_with_assets
from ..common.id_generator import generate_prefixed_id

logger = logging.getLogger(__name__)

DONE_STATUSES = {WorkOrderStatus.completed.value, WorkOrderStatus.closed.value}


def _get_work_order_or_404(db: Session, work_order_id: str) -> WorkOrder:
    work_order = db.query(WorkOrder).filter(
        WorkOrder.id == work_order_id).first()
    if not work_order:
        raise NotFoundError("Work order not found")
    return work_order


def get_work_orders(db: Session, asset_db: Session, params: WorkOrderRequest) -> WorkOrderListResponse:
    query = db.query(WorkOrder)

    if params.status and params.status.lower() != "all":
        query = query.filter(WorkOrder.status == params.status)
    if params.asset_tag:
        query = query.filter(WorkOrder.asset_tag == params.asset_tag)
    if params.search:
        search_term = f"%{params.search}%"
        query = query.filter(or_(WorkOrder.id.ilike(search_term),
                                 WorkOrder.notes.ilike(search_term)))

    total = query.with_entities(func.count(WorkOrder.id)).scalar()
    rows = (
        query
        .order_by(WorkOrder.created_at.desc())
        .offset(params.skip)
        .limit(params.limit)
        .all()
    )

    return WorkOrderListResponse(
        work_orders=[WorkOrderOut.model_validate(item)
                     for item in enrich_with_assets(asset_db, rows)],
        total=total,
    )


def get_work_order(db: Session, asset_db: Session, work_order_id: str) -> WorkOrderOut:
    work_order = _get_work_order_or_404(db, work_order_id)
    return WorkOrderOut.model_validate(enrich_with_asset(asset_db, work_order))


def create_work_order(db: Session, asset_db: Session, work_order: WorkOrderCreate) -> WorkOrderOut:
    data = work_order.model_dump()
    data["status"] = work_order.status.value

    # a work order raised from a complaint inherits its asset
    if work_order.complaint_id:
        complaint = db.query(Complaint).filter(
            Complaint.id == work_order.complaint_id).first()
        if not complaint:
            raise NotFoundError("Complaint not found")
        data["asset_tag"] = data.get("asset_tag") or complaint.asset_tag

    data["id"] = data.get("id") or generate_prefixed_id(db, WorkOrder.id, "WO")
    if data["status"] in DONE_STATUSES:
        data["completed_at"] = datetime.utcnow()

    db_work_order = WorkOrder(**data)
    db.add(db_work_order)
    db.commit()
    db.refresh(db_work_order)
    logger.info("Work order %s created", db_work_order.id)

    return WorkOrderOut.model_validate(enrich_with_asset(asset_db, db_work_order))


def update_work_order(
    db: Session,
    asset_db: Session,
    work_order_id: str,
    work_order: WorkOrderUpdate,
) -> WorkOrderOut:
    db_work_order = _get_work_order_or_404(db, work_order_id)
    update_data = work_order.model_dump(exclude_unset=True)

    new_status: Optional[str] = update_data.pop("status", None)
    if new_status is not None:
        new_status = WorkOrderStatus(new_status).value

    for field, value in update_data.items():
        setattr(db_work_order, field, value)

    if new_status:
        if new_status in DONE_STATUSES and not db_work_order.completed_at:
            db_work_order.completed_at = datetime.utcnow()
        db_work_order.status = new_status

    db.commit()
    db.refresh(db_work_order)
    return WorkOrderOut.model_validate(enrich_with_asset(asset_db, db_work_order))
