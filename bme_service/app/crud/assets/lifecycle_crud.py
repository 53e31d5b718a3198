# app/crud/assets/lifecycle_crud.py
import logging
from types import MappingProxyType
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from shared.core.exceptions import InvalidTransitionError, NotFoundError
from ...enum.asset_enum import HistoryEventType, LifecycleState
from ...models.assets.assets import Asset
from ...schemas.assets.lifecycle_schemas import LifecycleOut, LifecycleUpdate
from .asset_history_crud import create_asset_history, track_asset_update
from .lifecycle_analysis import calculate_asset_age, calculate_service_cost_ratio

logger = logging.getLogger(__name__)

_S = LifecycleState

# columns a partial update may not clear
NOT_NULL_FIELDS = ("lifecycle_state", "replacement_recommended")

LIFECYCLE_TRANSITIONS = MappingProxyType({
    _S.active: frozenset({_S.in_service, _S.spare, _S.under_service, _S.condemned, _S.disposed}),
    _S.in_service: frozenset({_S.active, _S.spare, _S.under_service}),
    _S.spare: frozenset({_S.active, _S.in_service}),
    _S.under_service: frozenset({_S.active, _S.in_service, _S.condemned}),
    _S.demo: frozenset({_S.active, _S.disposed}),
    _S.condemned: frozenset({_S.disposed}),
    _S.disposed: frozenset(),
})


def allowed_transitions(state) -> List[LifecycleState]:
    """Successor states of ``state`` in declaration order. Unknown states have none."""
    try:
        current = LifecycleState(state)
    except ValueError:
        return []
    targets = LIFECYCLE_TRANSITIONS[current]
    return [s for s in LifecycleState if s in targets]


def can_transition(current, target) -> bool:
    try:
        return LifecycleState(target) in allowed_transitions(current)
    except ValueError:
        return False


def validate_transition(current, target) -> LifecycleState:
    if not can_transition(current, target):
        raise InvalidTransitionError(
            getattr(current, "value", current), getattr(target, "value", target))
    return LifecycleState(target)


def _get_asset(db: Session, tag: str) -> Asset:
    asset = db.query(Asset).filter(Asset.tag == tag).first()
    if not asset:
        raise NotFoundError(f"Asset with ID {tag} not found")
    return asset


def _to_lifecycle_out(asset: Asset) -> LifecycleOut:
    return LifecycleOut(
        tag=asset.tag,
        lifecycle_state=asset.lifecycle_state or LifecycleState.active.value,
        age_years=calculate_asset_age(asset.purchase_date),
        total_downtime_hours=asset.total_downtime_hours or 0,
        total_service_cost=asset.total_service_cost or 0,
        utilization_percentage=asset.utilization_percentage or 0,
        service_cost_ratio=calculate_service_cost_ratio(
            asset.total_service_cost, asset.value),
        replacement_recommended=bool(asset.replacement_recommended),
        replacement_reason=asset.replacement_reason,
        allowed_transitions=allowed_transitions(asset.lifecycle_state),
    )


def get_lifecycle(db: Session, tag: str) -> LifecycleOut:
    return _to_lifecycle_out(_get_asset(db, tag))


def get_allowed_transitions(db: Session, tag: str) -> List[LifecycleState]:
    return allowed_transitions(_get_asset(db, tag).lifecycle_state)


def transition_lifecycle_state(
    db: Session,
    tag: str,
    target_state: LifecycleState,
    performed_by: Optional[str] = None,
) -> LifecycleOut:
    asset = _get_asset(db, tag)
    old_state = asset.lifecycle_state
    new_state = validate_transition(old_state, target_state)

    asset.lifecycle_state = new_state.value
    asset.age_years = calculate_asset_age(asset.purchase_date)
    db.commit()
    db.refresh(asset)

    # The state change stands even if the audit write fails.
    try:
        create_asset_history(
            db, tag, HistoryEventType.status_change,
            description=f"Lifecycle state changed from {old_state} to {new_state.value}",
            performed_by=performed_by,
            old_value=old_state,
            new_value=new_state.value,
            metadata={"field": "lifecycle_state"},
        )
    except SQLAlchemyError:
        db.rollback()
        logger.exception(
            "Failed to record lifecycle history for asset %s", tag)

    logger.info("Asset %s lifecycle %s -> %s", tag, old_state, new_state.value)
    return _to_lifecycle_out(asset)


def update_lifecycle(db: Session, tag: str, request: LifecycleUpdate) -> LifecycleOut:
    asset = _get_asset(db, tag)
    data = request.model_dump(exclude_unset=True, exclude={"performed_by"})
    for key in NOT_NULL_FIELDS:
        if key in data and data[key] is None:
            data.pop(key)

    target = data.get("lifecycle_state")
    if target is not None:
        if LifecycleState(target).value == asset.lifecycle_state:
            data.pop("lifecycle_state")
        else:
            data["lifecycle_state"] = validate_transition(
                asset.lifecycle_state, target).value

    changes = {}
    for field, value in data.items():
        old = getattr(asset, field)
        if old != value:
            changes[field] = {"old": old, "new": value}
        setattr(asset, field, value)

    asset.age_years = calculate_asset_age(asset.purchase_date)
    db.commit()
    db.refresh(asset)

    if request.performed_by and changes:
        try:
            track_asset_update(db, tag, changes, request.performed_by)
        except SQLAlchemyError:
            db.rollback()
            logger.exception(
                "Failed to record lifecycle update history for asset %s", tag)

    return _to_lifecycle_out(asset)
