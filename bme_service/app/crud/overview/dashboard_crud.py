from datetime import date, timedelta

from sqlalchemy import and_, func, or_
from sqlalchemy.orm import Session

from ...enum.asset_enum import LifecycleState
from ...enum.maintenance_enum import ComplaintStatus, PMStatus
from ...enum.procurement_enum import ContractStatus, ContractType
from ...models.assets.assets import Asset
from ...models.assets.contracts import Contract
from ...models.maintenance.complaints import Complaint
from ...models.maintenance.preventive_maintenance import PreventiveMaintenance
from ...schemas.overview.dashboard_schema import (
    CalibrationStatusSummary,
    ComplaintTrends,
    ContractUpdates,
    DashboardMetrics,
    DepartmentUtilization,
    DowntimeStats,
    PMCompliance,
)
from ..maintenance.pm_crud import overdue_filter

EXPIRY_WINDOW_DAYS = 30


def _percentage(part: float, whole: float) -> float:
    return round(part * 100 / whole, 1) if whole else 0.0


def get_complaint_trends(db: Session) -> ComplaintTrends:
    by_status = dict(
        db.query(Complaint.status, func.count(Complaint.id))
        .group_by(Complaint.status)
        .all()
    )
    by_priority = dict(
        db.query(Complaint.priority, func.count(Complaint.id))
        .group_by(Complaint.priority)
        .all()
    )

    return ComplaintTrends(
        open=by_status.get(ComplaintStatus.open.value, 0),
        in_progress=by_status.get(ComplaintStatus.in_progress.value, 0),
        resolved=by_status.get(ComplaintStatus.resolved.value, 0)
        + by_status.get(ComplaintStatus.closed.value, 0),
        by_priority=by_priority,
    )


def get_pm_compliance(db: Session) -> PMCompliance:
    total = db.query(func.count(PreventiveMaintenance.id))\
        .filter(PreventiveMaintenance.status != PMStatus.cancelled.value)\
        .scalar() or 0
    completed = db.query(func.count(PreventiveMaintenance.id))\
        .filter(PreventiveMaintenance.status == PMStatus.completed.value)\
        .scalar() or 0
    overdue = db.query(func.count(PreventiveMaintenance.id))\
        .filter(*overdue_filter())\
        .scalar() or 0

    return PMCompliance(
        rate=_percentage(completed, total),
        total=total,
        completed=completed,
        overdue=overdue,
    )


def get_calibration_status(asset_db: Session) -> CalibrationStatusSummary:
    today = date.today()
    soon = today + timedelta(days=EXPIRY_WINDOW_DAYS)
    base = asset_db.query(func.count(Asset.id)).filter(
        Asset.next_calibration_date != None,
        Asset.lifecycle_state != LifecycleState.disposed.value,
    )

    total = base.scalar() or 0
    expired = base.filter(Asset.next_calibration_date < today).scalar() or 0
    expiring_soon = base.filter(
        Asset.next_calibration_date >= today,
        Asset.next_calibration_date <= soon,
    ).scalar() or 0

    return CalibrationStatusSummary(
        total=total,
        expired=expired,
        expiring_soon=expiring_soon,
        compliant=total - expired - expiring_soon,
    )


def get_downtime_stats(asset_db: Session) -> DowntimeStats:
    total_hours, affected = asset_db.query(
        func.coalesce(func.sum(Asset.total_downtime_hours), 0),
        func.count(Asset.id),
    ).filter(Asset.total_downtime_hours > 0).one()

    total_hours = float(total_hours or 0)
    return DowntimeStats(
        total_hours=round(total_hours, 2),
        assets_affected=affected or 0,
        average_hours=round(total_hours / affected, 2) if affected else 0.0,
    )


def get_contract_updates(asset_db: Session) -> ContractUpdates:
    today = date.today()
    soon = today + timedelta(days=EXPIRY_WINDOW_DAYS)
    service_contract = Contract.type.in_(
        [ContractType.amc.value, ContractType.cmc.value])
    active = and_(service_contract,
                  Contract.status == ContractStatus.active.value)

    expiring_soon = asset_db.query(func.count(Contract.id)).filter(
        active, Contract.end_date >= today, Contract.end_date <= soon,
    ).scalar() or 0
    expired = asset_db.query(func.count(Contract.id)).filter(
        service_contract,
        or_(Contract.status == ContractStatus.expired.value,
            and_(active, Contract.end_date < today)),
    ).scalar() or 0
    renewals_due = asset_db.query(func.count(Contract.id)).filter(
        active, Contract.renewal_date <= today, Contract.end_date >= today,
    ).scalar() or 0

    return ContractUpdates(
        expiring_soon=expiring_soon,
        expired=expired,
        renewals_due=renewals_due,
    )


def get_utilization_by_department(asset_db: Session):
    rows = (
        asset_db.query(
            Asset.department,
            func.count(Asset.id),
            func.coalesce(func.avg(Asset.utilization_percentage), 0),
        )
        .group_by(Asset.department)
        .order_by(Asset.department.asc())
        .all()
    )
    fleet = sum(count for _, count, _ in rows)

    return [
        DepartmentUtilization(
            department=department,
            asset_count=count,
            average_utilization=round(float(average or 0), 1),
            share_of_fleet=_percentage(count, fleet),
        )
        for department, count, average in rows
    ]


def get_lifecycle_distribution(asset_db: Session):
    counts = dict(
        asset_db.query(Asset.lifecycle_state, func.count(Asset.id))
        .group_by(Asset.lifecycle_state)
        .all()
    )
    return {state.value: counts.get(state.value, 0) for state in LifecycleState}


def get_dashboard_metrics(db: Session, asset_db: Session) -> DashboardMetrics:
    return DashboardMetrics(
        complaint_trends=get_complaint_trends(db),
        pm_compliance=get_pm_compliance(db),
        calibration_status=get_calibration_status(asset_db),
        downtime_stats=get_downtime_stats(asset_db),
        amc_cmc_updates=get_contract_updates(asset_db),
        utilization_by_department=get_utilization_by_department(asset_db),
        lifecycle_distribution=get_lifecycle_distribution(asset_db),
    )
