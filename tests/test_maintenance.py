# tests/test_maintenance.py
from datetime import datetime, timedelta

import pytest

from shared.core.exceptions import NotFoundError, ValidationError
from bme_service.app.crud.maintenance import complaints_crud, pm_crud, work_order_crud
from bme_service.app.enum.maintenance_enum import (
    ComplaintPriority,
    ComplaintStatus,
    WorkOrderStatus,
)
from bme_service.app.models.assets import AssetHistory
from bme_service.app.schemas.maintenance.complaints_schemas import (
    ComplaintCreate,
    ComplaintRequest,
    ComplaintUpdate,
)
from bme_service.app.schemas.maintenance.pm_schemas import PMComplete, PMCreate, PMRequest
from bme_service.app.schemas.maintenance.work_order_schemas import (
    WorkOrderCreate,
    WorkOrderRequest,
    WorkOrderUpdate,
)


class TestComplaints:
    """Complaint intake and status handling"""

    def test_unknown_asset_rejected(self, maintenance_db, asset_db):
        with pytest.raises(NotFoundError):
            complaints_crud.create_complaint(maintenance_db, asset_db, ComplaintCreate(
                asset_tag="AST-NOPE", title="Alarm fault"))

    @pytest.mark.parametrize("priority,hours", [
        (ComplaintPriority.critical, 2),
        (ComplaintPriority.high, 4),
        (ComplaintPriority.medium, 8),
        (ComplaintPriority.low, 24),
    ])
    def test_sla_deadline(self, priority, hours):
        reported = datetime(2024, 5, 1, 10, 0)
        assert complaints_crud.calculate_sla_deadline(priority, reported) == \
            reported + timedelta(hours=hours)

    def test_create_enriches_and_records_history(self, maintenance_db, asset_db, make_asset):
        asset = make_asset()

        complaint = complaints_crud.create_complaint(maintenance_db, asset_db, ComplaintCreate(
            asset_tag=asset.tag, title="Display flickers",
            priority=ComplaintPriority.critical), reported_by="nurse-1")

        assert complaint.id.startswith("COMP-")
        assert complaint.status == "Open"
        assert complaint.reported_by == "nurse-1"
        assert complaint.sla_deadline - complaint.reported_at == timedelta(hours=2)
        assert complaint.asset.tag == asset.tag

        [event] = asset_db.query(AssetHistory).all()
        assert event.event_type == "Complaint"
        assert event.event_metadata["complaint_id"] == complaint.id

    def test_complaint_without_asset(self, maintenance_db, asset_db):
        complaint = complaints_crud.create_complaint(
            maintenance_db, asset_db, ComplaintCreate(title="Gas supply alarm"))
        assert complaint.asset is None
        assert asset_db.query(AssetHistory).count() == 0

    def test_status_timestamps(self, maintenance_db, asset_db, make_asset):
        asset = make_asset()
        created = complaints_crud.create_complaint(maintenance_db, asset_db, ComplaintCreate(
            asset_tag=asset.tag, title="No power"))

        in_progress = complaints_crud.update_complaint(
            maintenance_db, asset_db, created.id,
            ComplaintUpdate(status=ComplaintStatus.in_progress))
        assert in_progress.responded_at is not None
        assert in_progress.resolved_at is None

        resolved = complaints_crud.update_complaint(
            maintenance_db, asset_db, created.id,
            ComplaintUpdate(status=ComplaintStatus.resolved, resolution="Replaced fuse"))
        assert resolved.resolved_at is not None
        assert resolved.resolution == "Replaced fuse"
        assert resolved.responded_at == in_progress.responded_at

    def test_priority_change_moves_sla(self, maintenance_db, asset_db):
        created = complaints_crud.create_complaint(
            maintenance_db, asset_db, ComplaintCreate(title="Noise", priority="Low"))

        updated = complaints_crud.update_complaint(
            maintenance_db, asset_db, created.id,
            ComplaintUpdate(priority=ComplaintPriority.high))

        assert updated.priority == "High"
        assert updated.sla_deadline - updated.reported_at == timedelta(hours=4)

    def test_list_uses_one_asset_query(
        self, maintenance_db, asset_db, asset_engine, make_asset, count_queries
    ):
        tags = [make_asset().tag for _ in range(3)]
        for i in range(9):
            complaints_crud.create_complaint(maintenance_db, asset_db, ComplaintCreate(
                asset_tag=tags[i % 3], title=f"Fault {i}"))

        with count_queries(asset_engine) as statements:
            result = complaints_crud.get_complaints(
                maintenance_db, asset_db, ComplaintRequest(limit=50))

        assert result.total == 9
        assert len(statements) == 1
        assert all(c.asset is not None for c in result.complaints)

    def test_list_survives_deleted_asset(self, maintenance_db, asset_db, make_asset):
        asset = make_asset()
        tag = asset.tag
        complaints_crud.create_complaint(maintenance_db, asset_db, ComplaintCreate(
            asset_tag=tag, title="Leak"))
        asset_db.delete(asset)
        asset_db.commit()

        result = complaints_crud.get_complaints(maintenance_db, asset_db, ComplaintRequest())

        assert result.total == 1
        assert result.complaints[0].asset is None
        assert result.complaints[0].asset_tag == tag


class TestWorkOrders:
    """Work orders"""

    def test_prefixed_id_and_inherited_asset(self, maintenance_db, asset_db, make_asset):
        asset = make_asset()
        complaint = complaints_crud.create_complaint(maintenance_db, asset_db, ComplaintCreate(
            asset_tag=asset.tag, title="Battery"))

        work_order = work_order_crud.create_work_order(
            maintenance_db, asset_db, WorkOrderCreate(complaint_id=complaint.id))

        assert work_order.id.startswith("WO-")
        assert work_order.asset_tag == asset.tag
        assert work_order.asset.name == asset.name
        assert work_order.status == "Created"

    def test_unknown_complaint(self, maintenance_db, asset_db):
        with pytest.raises(NotFoundError):
            work_order_crud.create_work_order(
                maintenance_db, asset_db, WorkOrderCreate(complaint_id="COMP-0"))

    def test_completion_stamp(self, maintenance_db, asset_db):
        created = work_order_crud.create_work_order(
            maintenance_db, asset_db, WorkOrderCreate(asset_tag="AST-GONE"))
        assert created.completed_at is None
        assert created.asset is None

        done = work_order_crud.update_work_order(
            maintenance_db, asset_db, created.id,
            WorkOrderUpdate(status=WorkOrderStatus.completed, labor_hours=2.5))

        assert done.status == "Completed"
        assert done.completed_at is not None
        assert done.labor_hours == 2.5

    def test_list_filtered_by_status(self, maintenance_db, asset_db):
        work_order_crud.create_work_order(maintenance_db, asset_db, WorkOrderCreate())
        work_order_crud.create_work_order(
            maintenance_db, asset_db, WorkOrderCreate(status=WorkOrderStatus.assigned))

        result = work_order_crud.get_work_orders(
            maintenance_db, asset_db, WorkOrderRequest(status="Assigned"))

        assert result.total == 1
        assert result.work_orders[0].status == "Assigned"


class TestPreventiveMaintenance:
    """PM scheduling and completion"""

    def test_schedule_for_unknown_asset(self, maintenance_db, asset_db):
        with pytest.raises(NotFoundError):
            pm_crud.schedule_pm(maintenance_db, asset_db, PMCreate(
                asset_tag="AST-NOPE", scheduled_date=datetime.utcnow()))

    def test_past_schedule_reported_overdue(self, maintenance_db, asset_db, make_asset):
        asset = make_asset()
        past = pm_crud.schedule_pm(maintenance_db, asset_db, PMCreate(
            asset_tag=asset.tag, scheduled_date=datetime.utcnow() - timedelta(days=2)))
        future = pm_crud.schedule_pm(maintenance_db, asset_db, PMCreate(
            asset_tag=asset.tag, scheduled_date=datetime.utcnow() + timedelta(days=2)))

        assert past.status == "Overdue"
        assert future.status == "Scheduled"

        overdue = pm_crud.get_pms(maintenance_db, asset_db, PMRequest(status="Overdue"))
        assert [pm.id for pm in overdue.pms] == [past.id]

    def test_complete_records_history(self, maintenance_db, asset_db, make_asset):
        asset = make_asset()
        scheduled = pm_crud.schedule_pm(maintenance_db, asset_db, PMCreate(
            asset_tag=asset.tag, scheduled_date=datetime.utcnow(),
            technician_id="tech-7", checklist=[{"task": "Check alarms"}]))

        done = pm_crud.complete_pm(maintenance_db, asset_db, scheduled.id, PMComplete(
            checklist=[{"task": "Check alarms", "result": True}]))

        assert done.status == "Completed"
        assert done.completed_date is not None
        assert done.checklist[0].result is True

        [event] = asset_db.query(AssetHistory).all()
        assert event.event_type == "PM"
        assert event.performed_by == "tech-7"
        assert event.event_metadata["pm_id"] == scheduled.id

    def test_complete_twice_rejected(self, maintenance_db, asset_db, make_asset):
        asset = make_asset()
        scheduled = pm_crud.schedule_pm(maintenance_db, asset_db, PMCreate(
            asset_tag=asset.tag, scheduled_date=datetime.utcnow()))
        pm_crud.complete_pm(maintenance_db, asset_db, scheduled.id, PMComplete())

        with pytest.raises(ValidationError):
            pm_crud.complete_pm(maintenance_db, asset_db, scheduled.id, PMComplete())
