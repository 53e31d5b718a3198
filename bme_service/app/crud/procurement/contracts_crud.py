# app/crud/procurement/contracts_crud.py
import logging
import math
from datetime import date, datetime, time, timedelta
from typing import List, Optional

from sqlalchemy import func, or_
from sqlalchemy.orm import Session, selectinload

from shared.core.exceptions import NotFoundError, ValidationError
from ...enum.procurement_enum import ContractExpiryLevel, ContractStatus
from ...models.assets.assets import Asset
from ...models.assets.contracts import Contract
from ...models.assets.vendors import Vendor
from ...schemas.procurement.contracts_schemas import (
    ContractCreate,
    ContractListResponse,
    ContractOut,
    ContractRequest,
    ContractUpdate,
    RenewalReminder,
    RenewalReminderResult,
)

logger = logging.getLogger(__name__)

RENEWAL_NOTICE_DAYS = 30
RENEWAL_REMINDER_DAYS = (90, 60, 30)
RENEWAL_REMINDER_WINDOW = 7


def days_until_expiry(end_date: date, now: Optional[datetime] = None) -> int:
    # local clock, the same one auto-expiry reads through date.today()
    now = now or datetime.now()
    remaining = datetime.combine(end_date, time.min) - now
    return math.ceil(remaining.total_seconds() / 86400)


def expiry_level(days: Optional[int]) -> Optional[ContractExpiryLevel]:
    if days is None:
        return None
    if days < 0:
        return ContractExpiryLevel.expired
    if days <= 30:
        return ContractExpiryLevel.critical
    if days <= 60:
        return ContractExpiryLevel.warning
    if days <= 90:
        return ContractExpiryLevel.info
    return None


def validate_contract_dates(start_date: date, end_date: date):
    if end_date <= start_date:
        raise ValidationError("End date must be after start date")


def _validate_value(value: Optional[float]):
    if value is not None and value < 0:
        raise ValidationError("Contract value cannot be negative")


def _apply_auto_expiry(contract: Contract, today: Optional[date] = None):
    today = today or date.today()
    if contract.status == ContractStatus.active.value and contract.end_date < today:
        contract.status = ContractStatus.expired.value


def _resolve_assets(db: Session, tags: List[str]) -> List[Asset]:
    tags = list(dict.fromkeys(tags))
    if not tags:
        return []
    assets = db.query(Asset).filter(Asset.tag.in_(tags)).all()
    missing = set(tags) - {a.tag for a in assets}
    if missing:
        raise NotFoundError(
            f"Assets not found: {', '.join(sorted(missing))}")
    return assets


def to_contract_out(contract: Contract) -> ContractOut:
    days = None
    if contract.status == ContractStatus.active.value:
        days = days_until_expiry(contract.end_date)

    return ContractOut.model_validate({
        **{c.key: getattr(contract, c.key) for c in Contract.__table__.columns},
        "asset_tags": [a.tag for a in contract.assets],
        "documents": contract.documents or [],
        "days_until_expiry": days,
        "expiry_level": expiry_level(days),
    })


def _get_contract_or_404(db: Session, contract_id: str) -> Contract:
    contract = (
        db.query(Contract)
        .options(selectinload(Contract.assets))
        .filter(Contract.id == contract_id)
        .first()
    )
    if not contract:
        raise NotFoundError("Contract not found")
    return contract


def expire_lapsed_contracts(db: Session) -> int:
    updated = (
        db.query(Contract)
        .filter(Contract.status == ContractStatus.active.value,
                Contract.end_date < date.today())
        .update({Contract.status: ContractStatus.expired.value},
                synchronize_session=False)
    )
    if updated:
        db.commit()
        logger.info("%d contracts auto-expired", updated)
    return updated


# ----------------------------------------------------------------------
# CRUD OPERATIONS
# ----------------------------------------------------------------------

def get_contracts(db: Session, params: ContractRequest) -> ContractListResponse:
    expire_lapsed_contracts(db)

    query = db.query(Contract)
    if params.type and params.type.lower() != "all":
        query = query.filter(Contract.type == params.type)
    if params.status and params.status.lower() != "all":
        query = query.filter(Contract.status == params.status)
    if params.vendor_id:
        query = query.filter(Contract.vendor_id == params.vendor_id)
    if params.search:
        search_term = f"%{params.search}%"
        query = query.filter(or_(Contract.vendor_id.ilike(search_term),
                                 Contract.notes.ilike(search_term)))

    total = query.with_entities(func.count(Contract.id)).scalar()
    contracts = (
        query
        .options(selectinload(Contract.assets))
        .order_by(Contract.end_date.asc())
        .offset(params.skip)
        .limit(params.limit)
        .all()
    )
    return ContractListResponse(contracts=[to_contract_out(c) for c in contracts], total=total)


def get_contract(db: Session, contract_id: str) -> ContractOut:
    return to_contract_out(_get_contract_or_404(db, contract_id))


def create_contract(db: Session, contract: ContractCreate, created_by: Optional[str] = None) -> ContractOut:
    validate_contract_dates(contract.start_date, contract.end_date)
    _validate_value(contract.value)

    data = contract.model_dump(exclude={"asset_tags"})
    data["type"] = contract.type.value
    data["status"] = contract.status.value
    data["renewal_date"] = contract.renewal_date or (
        contract.end_date - timedelta(days=RENEWAL_NOTICE_DAYS))

    db_contract = Contract(**data, created_by=created_by)
    db_contract.assets = _resolve_assets(db, contract.asset_tags)
    _apply_auto_expiry(db_contract)

    db.add(db_contract)
    db.commit()
    db.refresh(db_contract)

    logger.info("Contract %s created for vendor %s",
                db_contract.id, db_contract.vendor_id)
    return to_contract_out(db_contract)


def update_contract(db: Session, contract_id: str, contract: ContractUpdate) -> ContractOut:
    db_contract = _get_contract_or_404(db, contract_id)
    update_data = contract.model_dump(exclude_unset=True)

    start = update_data.get("start_date") or db_contract.start_date
    end = update_data.get("end_date") or db_contract.end_date
    validate_contract_dates(start, end)
    _validate_value(update_data.get("value"))

    asset_tags = update_data.pop("asset_tags", None)
    if asset_tags is not None:
        db_contract.assets = _resolve_assets(db, asset_tags)

    for field, value in update_data.items():
        if value is None and field in ("vendor_id", "type", "start_date", "end_date", "value", "status"):
            continue
        setattr(db_contract, field, getattr(value, "value", value))

    if "end_date" in update_data and "renewal_date" not in update_data:
        db_contract.renewal_date = end - timedelta(days=RENEWAL_NOTICE_DAYS)

    _apply_auto_expiry(db_contract)
    db.commit()
    db.refresh(db_contract)
    return to_contract_out(db_contract)


def delete_contract(db: Session, contract_id: str) -> None:
    db_contract = _get_contract_or_404(db, contract_id)
    db.delete(db_contract)
    db.commit()
    logger.info("Contract %s deleted", contract_id)


def get_expiring_contracts(db: Session, days: int = 30) -> List[ContractOut]:
    today = date.today()
    contracts = (
        db.query(Contract)
        .options(selectinload(Contract.assets))
        .filter(
            Contract.status == ContractStatus.active.value,
            Contract.end_date >= today,
            Contract.end_date <= today + timedelta(days=days),
        )
        .order_by(Contract.end_date.asc())
        .all()
    )
    return [to_contract_out(c) for c in contracts]


# ----------------------------------------------------------------------
# RENEWAL REMINDERS
# ----------------------------------------------------------------------

def get_renewal_reminders(db: Session, today: Optional[date] = None) -> RenewalReminderResult:
    """
    Active contracts that just crossed a 90, 60 or 30 day mark.

    A contract is reported for a mark during the seven days up to it.
    Delivering the reminder (mail, in-app) is left to the caller.
    """
    today = today or date.today()
    contracts = (
        db.query(Contract)
        .filter(Contract.status == ContractStatus.active.value,
                Contract.end_date >= today)
        .order_by(Contract.end_date.asc())
        .all()
    )
    vendor_names = dict(
        db.query(Vendor.id, Vendor.name)
        .filter(Vendor.id.in_({c.vendor_id for c in contracts}))
        .all()
    ) if contracts else {}

    reminders = []
    for contract in contracts:
        days = (contract.end_date - today).days
        for mark in RENEWAL_REMINDER_DAYS:
            if mark - RENEWAL_REMINDER_WINDOW < days <= mark:
                reminders.append(RenewalReminder(
                    contract_id=contract.id,
                    vendor_id=contract.vendor_id,
                    vendor_name=vendor_names.get(contract.vendor_id),
                    type=contract.type,
                    end_date=contract.end_date,
                    days_until_expiry=days,
                    reminder_day=mark,
                ))
                logger.info("Renewal reminder: %s contract %s with %s expires in %d days",
                            contract.type, contract.id,
                            vendor_names.get(contract.vendor_id, contract.vendor_id), days)

    return RenewalReminderResult(count=len(reminders), reminders=reminders)
