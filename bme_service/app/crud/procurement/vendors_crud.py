# app/crud/procurement/vendors_crud.py
import logging
from datetime import date
from typing import Dict, Iterable, List, Optional

from sqlalchemy import func, or_
from sqlalchemy.orm import Session, selectinload

from shared.core.exceptions import NotFoundError, ValidationError
from ...enum.procurement_enum import ContractStatus
from ...models.assets.contracts import Contract
from ...models.assets.vendors import Vendor
from ...schemas.procurement.contracts_schemas import ContractOut
from ...schemas.procurement.vendors_schemas import (
    VendorCreate,
    VendorListResponse,
    VendorOut,
    VendorPerformance,
    VendorRequest,
    VendorUpdate,
)
from ..common.id_generator import generate_prefixed_id
from .contracts_crud import to_contract_out

logger = logging.getLogger(__name__)

EXPIRING_SOON_DAYS = 90

SORT_COLUMNS = {
    "name": Vendor.name,
    "rating": Vendor.rating,
    "performance_score": Vendor.performance_score,
}


def _active_contract_counts(db: Session, vendor_ids: Iterable[str]) -> Dict[str, int]:
    vendor_ids = list(vendor_ids)
    if not vendor_ids:
        return {}
    return dict(
        db.query(Contract.vendor_id, func.count(Contract.id))
        .filter(Contract.vendor_id.in_(vendor_ids),
                Contract.status == ContractStatus.active.value)
        .group_by(Contract.vendor_id)
        .all()
    )


def _to_out(vendor: Vendor, active_contracts: int = 0) -> VendorOut:
    out = VendorOut.model_validate(vendor)
    out.active_contracts_count = active_contracts
    return out


def _get_vendor_or_404(db: Session, vendor_id: str) -> Vendor:
    vendor = db.query(Vendor).filter(Vendor.id == vendor_id).first()
    if not vendor:
        raise NotFoundError("Vendor not found")
    return vendor


# ----------------------------------------------------------------------
# CRUD OPERATIONS
# ----------------------------------------------------------------------

def get_vendors(db: Session, params: VendorRequest) -> VendorListResponse:
    query = db.query(Vendor)

    if params.search:
        search_term = f"%{params.search}%"
        query = query.filter(or_(
            Vendor.name.ilike(search_term),
            Vendor.contact_person.ilike(search_term),
            Vendor.email.ilike(search_term),
        ))
    if params.status and params.status.lower() != "all":
        query = query.filter(Vendor.status == params.status)
    if params.min_rating is not None:
        query = query.filter(Vendor.rating >= params.min_rating)

    total = query.with_entities(func.count(Vendor.id)).scalar()
    column = SORT_COLUMNS[params.sort_by]
    vendors = (
        query
        .order_by(column.desc() if params.sort_order == "desc" else column.asc())
        .offset(params.skip)
        .limit(params.limit)
        .all()
    )

    counts = _active_contract_counts(db, [v.id for v in vendors])
    return VendorListResponse(
        vendors=[_to_out(v, counts.get(v.id, 0)) for v in vendors],
        total=total,
    )


def get_vendor(db: Session, vendor_id: str) -> VendorOut:
    vendor = _get_vendor_or_404(db, vendor_id)
    return _to_out(vendor, _active_contract_counts(db, [vendor.id]).get(vendor.id, 0))


def create_vendor(db: Session, vendor: VendorCreate, created_by: Optional[str] = None) -> VendorOut:
    data = vendor.model_dump()
    data["status"] = vendor.status.value

    db_vendor = Vendor(
        id=generate_prefixed_id(db, Vendor.id, "VEND"),
        created_by=created_by,
        **data,
    )
    db.add(db_vendor)
    db.commit()
    db.refresh(db_vendor)

    logger.info("Vendor %s registered as %s", db_vendor.name, db_vendor.id)
    return _to_out(db_vendor)


def update_vendor(db: Session, vendor_id: str, vendor: VendorUpdate) -> VendorOut:
    db_vendor = _get_vendor_or_404(db, vendor_id)
    update_data = vendor.model_dump(exclude_unset=True)

    for field, value in update_data.items():
        if value is None and field in ("name", "status"):
            continue
        setattr(db_vendor, field, getattr(value, "value", value))

    db.commit()
    db.refresh(db_vendor)
    return get_vendor(db, vendor_id)


def delete_vendor(db: Session, vendor_id: str) -> None:
    db_vendor = _get_vendor_or_404(db, vendor_id)
    if _active_contract_counts(db, [vendor_id]).get(vendor_id):
        raise ValidationError("Vendor has active contracts and cannot be deleted")
    db.delete(db_vendor)
    db.commit()
    logger.info("Vendor %s deleted", vendor_id)


def get_vendor_contracts(db: Session, vendor_id: str) -> List[ContractOut]:
    _get_vendor_or_404(db, vendor_id)
    contracts = (
        db.query(Contract)
        .options(selectinload(Contract.assets))
        .filter(Contract.vendor_id == vendor_id)
        .order_by(Contract.end_date.asc())
        .all()
    )
    return [to_contract_out(c) for c in contracts]


def get_vendor_performance(db: Session, vendor_id: str, today: Optional[date] = None) -> VendorPerformance:
    vendor = _get_vendor_or_404(db, vendor_id)
    today = today or date.today()
    contracts = db.query(Contract).filter(Contract.vendor_id == vendor_id).all()

    active = [c for c in contracts if c.status == ContractStatus.active.value]
    expired_status = [c for c in contracts if c.status == ContractStatus.expired.value]
    renewed = [c for c in contracts if c.status == ContractStatus.renewed.value]
    total_value = sum(c.value or 0 for c in active)

    return VendorPerformance(
        rating=vendor.rating or 0,
        performance_score=vendor.performance_score or 0,
        total_contracts=len(contracts),
        active_contracts=len(active),
        expired_contracts=len(expired_status),
        total_contract_value=total_value,
        expiring_soon=sum(
            1 for c in active if 0 < (c.end_date - today).days <= EXPIRING_SOON_DAYS),
        # still Active but past end date, not yet auto-expired
        expired=sum(1 for c in active if c.end_date < today),
        average_contract_value=total_value / len(active) if active else 0,
        contract_renewal_rate=round(len(renewed) * 100 / len(contracts), 2) if contracts else 0,
    )
