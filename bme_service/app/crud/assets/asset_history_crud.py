# app/crud/assets/asset_history_crud.py
import logging
from collections import OrderedDict
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from shared.core.exceptions import NotFoundError
from ...enum.asset_enum import HistoryEventType
from ...models.assets.assets import Asset
from ...models.assets.asset_history import AssetHistory
from ...schemas.assets.asset_history_schemas import (
    AssetHistoryOut,
    AssetHistoryRequest,
    HistoryStatsOut,
    HistoryTimelineEntry,
)

logger = logging.getLogger(__name__)

MOVE_FIELDS = {"location", "department"}


def _jsonable(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return value


def _as_text(value: Any) -> Optional[str]:
    value = _jsonable(value)
    return None if value is None else str(value)


def _find_asset(db: Session, tag: str) -> Optional[Asset]:
    return db.query(Asset).filter(Asset.tag == tag).first()


def _empty_type_map(factory):
    return {event_type.value: factory() for event_type in HistoryEventType}


def classify_change(field: str) -> HistoryEventType:
    if field in MOVE_FIELDS:
        return HistoryEventType.move
    # status, lifecycle_state and anything unclassified
    return HistoryEventType.status_change


def build_history_event(
    asset: Asset,
    event_type: HistoryEventType,
    description: Optional[str] = None,
    performed_by: Optional[str] = None,
    old_value: Any = None,
    new_value: Any = None,
    metadata: Optional[Dict[str, Any]] = None,
    event_date: Optional[datetime] = None,
) -> AssetHistory:
    return AssetHistory(
        asset_id=asset.id,
        event_type=HistoryEventType(event_type).value,
        event_date=event_date or datetime.utcnow(),
        description=description,
        performed_by=performed_by,
        old_value=_as_text(old_value),
        new_value=_as_text(new_value),
        event_metadata={k: _jsonable(v)
                        for k, v in (metadata or {}).items()},
    )


def create_asset_history(
    db: Session,
    tag: str,
    event_type: HistoryEventType,
    description: Optional[str] = None,
    performed_by: Optional[str] = None,
    old_value: Any = None,
    new_value: Any = None,
    metadata: Optional[Dict[str, Any]] = None,
    event_date: Optional[datetime] = None,
) -> AssetHistory:
    asset = _find_asset(db, tag)
    if not asset:
        raise NotFoundError(f"Asset with ID {tag} not found")

    entry = build_history_event(asset, event_type, description, performed_by,
                                old_value, new_value, metadata, event_date)
    db.add(entry)
    db.commit()
    db.refresh(entry)
    return entry


def track_asset_update(
    db: Session,
    tag: str,
    changes: Dict[str, Dict[str, Any]],
    performed_by: Optional[str] = None,
) -> List[AssetHistory]:
    """
    Record one history row per changed field.

    ``changes`` maps field name to ``{"old": ..., "new": ...}``. Fields whose
    old and new values are equal are ignored. Timeline views filter on the
    individual rows, so changes are never merged into a single event.
    """
    changed = {field: values for field, values in changes.items()
               if values.get("old") != values.get("new")}
    if not changed:
        return []

    asset = _find_asset(db, tag)
    if not asset:
        raise NotFoundError(f"Asset with ID {tag} not found")

    entries = []
    for field, values in changed.items():
        old, new = values.get("old"), values.get("new")
        entries.append(build_history_event(
            asset,
            classify_change(field),
            description=f'{field} changed from "{_as_text(old)}" to "{_as_text(new)}"',
            performed_by=performed_by,
            old_value=old,
            new_value=new,
            metadata={"field": field, "old_value": old, "new_value": new},
        ))

    db.add_all(entries)
    db.commit()
    return entries


def track_asset_move(
    db: Session,
    tag: str,
    from_location: Optional[str] = None,
    to_location: Optional[str] = None,
    from_department: Optional[str] = None,
    to_department: Optional[str] = None,
    reason: Optional[str] = None,
    moved_by: Optional[str] = None,
) -> AssetHistory:
    parts = []
    if from_location and to_location:
        parts.append(f"Moved from {from_location} to {to_location}")
    if from_department and to_department:
        parts.append(
            f"Department changed from {from_department} to {to_department}")
    if reason:
        parts.append(f"Reason: {reason}")

    return create_asset_history(
        db, tag, HistoryEventType.move,
        description=". ".join(parts),
        performed_by=moved_by,
        metadata={
            "from_location": from_location,
            "to_location": to_location,
            "from_department": from_department,
            "to_department": to_department,
            "reason": reason,
        },
    )


# ----------------------------------------------------------------------
# READS
# ----------------------------------------------------------------------

def get_asset_history(db: Session, tag: str, params: AssetHistoryRequest) -> List[AssetHistoryOut]:
    asset = _find_asset(db, tag)
    if not asset:
        return []

    query = db.query(AssetHistory).filter(AssetHistory.asset_id == asset.id)
    if params.event_type:
        query = query.filter(AssetHistory.event_type ==
                             params.event_type.value)

    sort_column = getattr(AssetHistory, params.sort_by)
    sort_column = sort_column.asc() if params.sort_order == "asc" else sort_column.desc()

    rows = query.order_by(sort_column).offset(
        params.skip).limit(params.limit).all()
    return [AssetHistoryOut.model_validate(row) for row in rows]


def _all_history(db: Session, tag: str) -> List[AssetHistory]:
    asset = _find_asset(db, tag)
    if not asset:
        return []
    return (
        db.query(AssetHistory)
        .filter(AssetHistory.asset_id == asset.id)
        .order_by(AssetHistory.event_date.desc())
        .all()
    )


def get_asset_history_by_type(db: Session, tag: str) -> Dict[str, List[AssetHistoryOut]]:
    grouped = _empty_type_map(list)
    for row in _all_history(db, tag):
        if row.event_type in grouped:
            grouped[row.event_type].append(AssetHistoryOut.model_validate(row))
    return grouped


def get_asset_history_timeline(db: Session, tag: str) -> List[HistoryTimelineEntry]:
    timeline: "OrderedDict[str, List[AssetHistoryOut]]" = OrderedDict()
    for row in _all_history(db, tag):
        day = row.event_date.date().isoformat()
        timeline.setdefault(day, []).append(AssetHistoryOut.model_validate(row))

    return [
        HistoryTimelineEntry(date=day, events=events)
        for day, events in sorted(timeline.items(), key=lambda item: item[0], reverse=True)
    ]


def get_asset_history_stats(db: Session, tag: str) -> HistoryStatsOut:
    rows = _all_history(db, tag)
    counts = _empty_type_map(int)
    for row in rows:
        if row.event_type in counts:
            counts[row.event_type] += 1

    dates = [row.event_date for row in rows]
    return HistoryStatsOut(
        total_events=len(rows),
        events_by_type=counts,
        first_event_date=min(dates) if dates else None,
        last_event_date=max(dates) if dates else None,
    )
