# tests/test_lifecycle_state.py
import pytest
from sqlalchemy.exc import OperationalError

from shared.core.exceptions import InvalidTransitionError, NotFoundError
from bme_service.app.crud.assets import lifecycle_crud
from bme_service.app.enum.asset_enum import HistoryEventType, LifecycleState
from bme_service.app.models.assets import AssetHistory
from bme_service.app.schemas.assets.lifecycle_schemas import LifecycleUpdate


class TestTransitionGraph:
    """Allowed lifecycle transitions"""

    def test_active_successors(self):
        assert lifecycle_crud.allowed_transitions("Active") == [
            LifecycleState.in_service,
            LifecycleState.spare,
            LifecycleState.under_service,
            LifecycleState.condemned,
            LifecycleState.disposed,
        ]

    def test_condemned_can_only_be_disposed(self):
        assert lifecycle_crud.allowed_transitions(LifecycleState.condemned) == [
            LifecycleState.disposed]

    @pytest.mark.parametrize("target", list(LifecycleState))
    def test_disposed_is_terminal(self, target):
        assert not lifecycle_crud.can_transition(LifecycleState.disposed, target)
        with pytest.raises(InvalidTransitionError):
            lifecycle_crud.validate_transition(LifecycleState.disposed, target)

    @pytest.mark.parametrize("state", list(LifecycleState))
    def test_no_self_transitions(self, state):
        assert state not in lifecycle_crud.allowed_transitions(state)

    def test_unknown_state_has_no_successors(self):
        assert lifecycle_crud.allowed_transitions("Retired") == []
        assert not lifecycle_crud.can_transition("Active", "Retired")

    def test_transition_table_is_read_only(self):
        with pytest.raises(TypeError):
            lifecycle_crud.LIFECYCLE_TRANSITIONS[LifecycleState.disposed] = frozenset(
                {LifecycleState.active})

    def test_invalid_transition_message(self):
        with pytest.raises(InvalidTransitionError) as exc_info:
            lifecycle_crud.validate_transition("Spare", "Disposed")
        assert exc_info.value.status_code == 409
        assert exc_info.value.current_state == "Spare"
        assert exc_info.value.target_state == "Disposed"


class TestTransitionLifecycleState:
    """State changes against the asset store"""

    def test_transition_records_one_status_change(self, asset_db, make_asset):
        asset = make_asset()

        result = lifecycle_crud.transition_lifecycle_state(
            asset_db, asset.tag, LifecycleState.in_service, performed_by="u-1")

        assert result.lifecycle_state == "In-Service"
        assert result.allowed_transitions == [
            LifecycleState.active, LifecycleState.spare, LifecycleState.under_service]

        events = asset_db.query(AssetHistory).filter(
            AssetHistory.asset_id == asset.id).all()
        assert len(events) == 1
        event = events[0]
        assert event.event_type == HistoryEventType.status_change.value
        assert event.old_value == "Active"
        assert event.new_value == "In-Service"
        assert event.performed_by == "u-1"
        assert event.event_metadata == {"field": "lifecycle_state"}

    def test_rejected_transition_leaves_asset_untouched(self, asset_db, make_asset):
        asset = make_asset(lifecycle_state="Disposed")

        with pytest.raises(InvalidTransitionError):
            lifecycle_crud.transition_lifecycle_state(
                asset_db, asset.tag, LifecycleState.active)

        asset_db.refresh(asset)
        assert asset.lifecycle_state == "Disposed"
        assert asset_db.query(AssetHistory).count() == 0

    def test_unknown_asset(self, asset_db):
        with pytest.raises(NotFoundError):
            lifecycle_crud.transition_lifecycle_state(
                asset_db, "AST-MISSING", LifecycleState.spare)

    def test_history_failure_does_not_undo_transition(self, asset_db, make_asset, monkeypatch):
        asset = make_asset()

        def _broken_history(*args, **kwargs):
            raise OperationalError("INSERT INTO asset_history", {}, Exception("disk I/O error"))

        monkeypatch.setattr(lifecycle_crud, "create_asset_history", _broken_history)

        result = lifecycle_crud.transition_lifecycle_state(
            asset_db, asset.tag, LifecycleState.spare, performed_by="u-1")

        assert result.lifecycle_state == "Spare"
        asset_db.expire_all()
        asset_db.refresh(asset)
        assert asset.lifecycle_state == "Spare"
        assert asset_db.query(AssetHistory).count() == 0


class TestUpdateLifecycle:
    """Partial lifecycle updates"""

    def test_counters_updated_and_tracked(self, asset_db, make_asset):
        asset = make_asset()

        result = lifecycle_crud.update_lifecycle(asset_db, asset.tag, LifecycleUpdate(
            total_downtime_hours=12.5, utilization_percentage=80, performed_by="u-2"))

        assert result.total_downtime_hours == 12.5
        assert result.utilization_percentage == 80
        fields = {e.event_metadata["field"] for e in asset_db.query(AssetHistory).all()}
        assert fields == {"total_downtime_hours", "utilization_percentage"}

    def test_untracked_without_actor(self, asset_db, make_asset):
        asset = make_asset()

        lifecycle_crud.update_lifecycle(
            asset_db, asset.tag, LifecycleUpdate(total_downtime_hours=3))

        assert asset_db.query(AssetHistory).count() == 0

    def test_invalid_state_change_rejected(self, asset_db, make_asset):
        asset = make_asset(lifecycle_state="Condemned")

        with pytest.raises(InvalidTransitionError):
            lifecycle_crud.update_lifecycle(asset_db, asset.tag, LifecycleUpdate(
                lifecycle_state=LifecycleState.active))

    def test_same_state_is_a_no_op(self, asset_db, make_asset):
        asset = make_asset(lifecycle_state="Disposed")

        result = lifecycle_crud.update_lifecycle(asset_db, asset.tag, LifecycleUpdate(
            lifecycle_state=LifecycleState.disposed, performed_by="u-2"))

        assert result.lifecycle_state == "Disposed"
        assert asset_db.query(AssetHistory).count() == 0

    def test_age_is_refreshed(self, asset_db, make_asset):
        asset = make_asset(age_years=None)

        lifecycle_crud.update_lifecycle(asset_db, asset.tag, LifecycleUpdate())

        asset_db.refresh(asset)
        assert asset.age_years > 0

    @pytest.mark.parametrize("body", [
        {"replacement_recommended": None},
        {"lifecycle_state": ""},
        {"lifecycle_state": None, "total_downtime_hours": 4},
    ])
    def test_null_required_fields_are_ignored(self, asset_db, make_asset, body):
        asset = make_asset(replacement_recommended=True, lifecycle_state="Spare")

        result = lifecycle_crud.update_lifecycle(
            asset_db, asset.tag, LifecycleUpdate.model_validate(body))

        assert result.lifecycle_state == "Spare"
        assert result.replacement_recommended is True

    def test_history_failure_keeps_counters(self, asset_db, make_asset, monkeypatch):
        asset = make_asset()

        def _broken_history(*args, **kwargs):
            raise OperationalError("INSERT INTO asset_history", {}, Exception("disk I/O error"))

        monkeypatch.setattr(lifecycle_crud, "track_asset_update", _broken_history)

        result = lifecycle_crud.update_lifecycle(asset_db, asset.tag, LifecycleUpdate(
            total_service_cost=900, performed_by="u-2"))

        assert result.total_service_cost == 900
