# app/crud/assets/utilization_crud.py
import logging
from collections import OrderedDict
from datetime import date, timedelta
from typing import Dict, List, Optional

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import func
from sqlalchemy.orm import Session

from shared.core.exceptions import NotFoundError, ValidationError
from shared.exporthelper import read_csv_rows
from ...enum.asset_enum import UtilizationGrouping, UtilizationSource
from ...models.assets.assets import Asset
from ...models.assets.utilization import EquipmentUtilization
from ...schemas.assets.utilization_schemas import (
    UtilizationCreate,
    UtilizationIssue,
    UtilizationIssues,
    UtilizationListResponse,
    UtilizationOut,
    UtilizationRequest,
    UtilizationStats,
    UtilizationTrendPoint,
    UtilizationUploadResult,
)

logger = logging.getLogger(__name__)

HOURS_PER_DAY = 24
ROLLING_WINDOW_DAYS = 30

UPLOAD_HEADER_MAP = {
    "Asset ID": "asset_tag", "asset id": "asset_tag", "assetId": "asset_tag", "asset_id": "asset_tag",
    "Asset Name": "asset_name", "assetName": "asset_name",
    "Serial Number": "serial_number", "serialNumber": "serial_number",
    "Date": "date",
    "Usage Hours": "usage_hours", "usageHours": "usage_hours",
    "Usage Count": "usage_count", "usageCount": "usage_count",
    "Notes": "notes",
}


def utilization_percentage(total_hours: float, days: int) -> float:
    """Share of ``days`` × 24 h in use, capped at 100 and rounded to 2 places."""
    if days <= 0:
        return 0.0
    return min(100.0, round(total_hours / (days * HOURS_PER_DAY) * 100, 2))


def _get_asset_or_404(db: Session, tag: str) -> Asset:
    asset = db.query(Asset).filter(Asset.tag == tag).first()
    if not asset:
        raise NotFoundError(f"Asset with ID {tag} not found")
    return asset


def _to_out(record: EquipmentUtilization, asset: Optional[Asset]) -> UtilizationOut:
    return UtilizationOut(
        id=record.id,
        asset_tag=asset.tag if asset else None,
        asset_name=asset.name if asset else None,
        department=asset.department if asset else None,
        date=record.date,
        usage_hours=record.usage_hours,
        usage_count=record.usage_count,
        recorded_by=record.recorded_by,
        source=record.source,
        notes=record.notes,
        created_at=record.created_at,
    )


def _upsert(db: Session, asset: Asset, entry: UtilizationCreate) -> EquipmentUtilization:
    # one row per asset and day; a second entry for the same day replaces the first
    record = db.query(EquipmentUtilization).filter(
        EquipmentUtilization.asset_id == asset.id,
        EquipmentUtilization.date == entry.date,
    ).first()

    if record:
        record.usage_hours = entry.usage_hours
        record.usage_count = entry.usage_count
        record.notes = entry.notes
        if entry.recorded_by:
            record.recorded_by = entry.recorded_by
    else:
        record = EquipmentUtilization(
            asset_id=asset.id,
            date=entry.date,
            usage_hours=entry.usage_hours,
            usage_count=entry.usage_count,
            recorded_by=entry.recorded_by,
            source=entry.source.value,
            notes=entry.notes,
        )
        db.add(record)
    return record


def update_asset_utilization(db: Session, asset: Asset, today: Optional[date] = None) -> float:
    """Recompute ``asset.utilization_percentage`` from the last 30 days of entries."""
    today = today or date.today()
    hours, days = db.query(
        func.coalesce(func.sum(EquipmentUtilization.usage_hours), 0),
        func.count(EquipmentUtilization.id),
    ).filter(
        EquipmentUtilization.asset_id == asset.id,
        EquipmentUtilization.date >= today - timedelta(days=ROLLING_WINDOW_DAYS),
    ).one()

    asset.utilization_percentage = utilization_percentage(float(hours or 0), days or 0)
    db.commit()
    return asset.utilization_percentage


# ----------------------------------------------------------------------
# CRUD OPERATIONS
# ----------------------------------------------------------------------

def record_utilization(db: Session, entry: UtilizationCreate) -> UtilizationOut:
    asset = _get_asset_or_404(db, entry.asset_tag)
    record = _upsert(db, asset, entry)
    db.commit()
    db.refresh(record)

    update_asset_utilization(db, asset)
    logger.info("Utilization for %s on %s: %s h",
                asset.tag, entry.date, entry.usage_hours)
    return _to_out(record, asset)


def get_utilization_records(db: Session, params: UtilizationRequest) -> UtilizationListResponse:
    query = db.query(EquipmentUtilization, Asset).join(
        Asset, Asset.id == EquipmentUtilization.asset_id)

    if params.asset_tag:
        asset = _get_asset_or_404(db, params.asset_tag)
        query = query.filter(EquipmentUtilization.asset_id == asset.id)
    if params.department:
        query = query.filter(Asset.department == params.department)
    if params.date_from:
        query = query.filter(EquipmentUtilization.date >= params.date_from)
    if params.date_to:
        query = query.filter(EquipmentUtilization.date <= params.date_to)

    total = query.with_entities(func.count(EquipmentUtilization.id)).scalar()
    rows = (
        query
        .order_by(EquipmentUtilization.date.desc())
        .offset(params.skip)
        .limit(params.limit)
        .all()
    )
    return UtilizationListResponse(
        records=[_to_out(record, asset) for record, asset in rows],
        total=total,
    )


def _records_for(db: Session, asset: Asset, date_from: Optional[date], date_to: Optional[date]):
    query = db.query(EquipmentUtilization).filter(
        EquipmentUtilization.asset_id == asset.id)
    if date_from:
        query = query.filter(EquipmentUtilization.date >= date_from)
    if date_to:
        query = query.filter(EquipmentUtilization.date <= date_to)
    return query.order_by(EquipmentUtilization.date.asc()).all()


def calculate_utilization_stats(
    db: Session,
    tag: str,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
) -> UtilizationStats:
    asset = _get_asset_or_404(db, tag)
    records = _records_for(db, asset, date_from, date_to)

    total_hours = sum(r.usage_hours or 0 for r in records)
    total_count = sum(r.usage_count or 0 for r in records)
    n = len(records)

    return UtilizationStats(
        asset_tag=asset.tag,
        asset_name=asset.name,
        total_usage_hours=total_hours,
        total_usage_count=total_count,
        average_usage_hours=total_hours / n if n else 0,
        average_usage_count=total_count / n if n else 0,
        utilization_percentage=utilization_percentage(total_hours, n),
        record_count=n,
        date_from=records[0].date if records else date_from,
        date_to=records[-1].date if records else date_to,
    )


def _period(day: date, group_by: UtilizationGrouping) -> str:
    if group_by == UtilizationGrouping.week:
        # weeks start on Sunday
        return (day - timedelta(days=(day.weekday() + 1) % 7)).isoformat()
    if group_by == UtilizationGrouping.month:
        return f"{day.year}-{day.month:02d}"
    return day.isoformat()


def get_utilization_trends(
    db: Session,
    tag: str,
    date_from: date,
    date_to: date,
    group_by: UtilizationGrouping = UtilizationGrouping.day,
) -> List[UtilizationTrendPoint]:
    if date_to < date_from:
        raise ValidationError("date_to must not be before date_from")
    asset = _get_asset_or_404(db, tag)

    grouped: Dict[str, Dict[str, float]] = OrderedDict()
    for record in _records_for(db, asset, date_from, date_to):
        bucket = grouped.setdefault(
            _period(record.date, UtilizationGrouping(group_by)),
            {"usage_hours": 0, "usage_count": 0})
        bucket["usage_hours"] += record.usage_hours or 0
        bucket["usage_count"] += record.usage_count or 0

    return [UtilizationTrendPoint(period=period, **totals)
            for period, totals in grouped.items()]


def identify_utilization_issues(
    db: Session,
    threshold_low: float = 20,
    threshold_high: float = 80,
) -> UtilizationIssues:
    if threshold_low >= threshold_high:
        raise ValidationError("threshold_low must be below threshold_high")

    assets = (
        db.query(Asset)
        .filter(Asset.utilization_percentage != None)
        .order_by(Asset.utilization_percentage.asc())
        .all()
    )

    def issue(asset: Asset, threshold: float) -> UtilizationIssue:
        return UtilizationIssue(
            asset_tag=asset.tag,
            asset_name=asset.name,
            department=asset.department,
            utilization_percentage=asset.utilization_percentage,
            threshold=threshold,
        )

    return UtilizationIssues(
        under_utilized=[issue(a, threshold_low) for a in assets
                        if a.utilization_percentage < threshold_low],
        over_utilized=[issue(a, threshold_high) for a in assets
                       if a.utilization_percentage > threshold_high],
    )


# ----------------------------------------------------------------------
# CSV UPLOAD
# ----------------------------------------------------------------------

def _find_upload_asset(db: Session, row: Dict[str, str]) -> Optional[Asset]:
    if row.get("asset_tag"):
        return db.query(Asset).filter(Asset.tag == row["asset_tag"]).first()
    if row.get("serial_number"):
        return db.query(Asset).filter(
            Asset.serial_number == row["serial_number"]).first()
    if row.get("asset_name"):
        return db.query(Asset).filter(
            Asset.name.ilike(f"%{row['asset_name']}%")).first()
    return None


def upload_utilization_csv(
    db: Session,
    content: bytes,
    recorded_by: Optional[str] = None,
) -> UtilizationUploadResult:
    rows = read_csv_rows(content, UPLOAD_HEADER_MAP)
    result = UtilizationUploadResult(
        total=len(rows), successful=0, failed=0, errors=[])
    touched: Dict[str, Asset] = {}

    for index, row in enumerate(rows, start=2):  # row 1 is the header
        asset = _find_upload_asset(db, row)
        if not asset:
            label = row.get("asset_tag") or row.get("asset_name") or row.get("serial_number")
            result.failed += 1
            result.errors.append({"row": index, "message": f"Asset not found: {label}"})
            continue

        try:
            entry = UtilizationCreate.model_validate({
                **row,
                "asset_tag": asset.tag,
                "recorded_by": recorded_by,
                "source": UtilizationSource.csv,
            })
        except PydanticValidationError as e:
            result.failed += 1
            result.errors.append({
                "row": index,
                "message": "; ".join(err.get("msg", "") for err in e.errors()),
            })
            continue

        _upsert(db, asset, entry)
        db.commit()
        touched[asset.id] = asset
        result.successful += 1

    for asset in touched.values():
        update_asset_utilization(db, asset)

    logger.info("Utilization upload: %d rows, %d stored, %d failed",
                result.total, result.successful, result.failed)
    return result
