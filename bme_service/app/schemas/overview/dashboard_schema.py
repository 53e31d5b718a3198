from typing import Dict, List

from pydantic import BaseModel


class ComplaintTrends(BaseModel):
    open: int
    in_progress: int
    resolved: int
    by_priority: Dict[str, int]


class PMCompliance(BaseModel):
    rate: float
    total: int
    completed: int
    overdue: int


class CalibrationStatusSummary(BaseModel):
    total: int
    expired: int
    expiring_soon: int
    compliant: int


class DowntimeStats(BaseModel):
    total_hours: float
    assets_affected: int
    average_hours: float


class ContractUpdates(BaseModel):
    expiring_soon: int
    expired: int
    renewals_due: int


class DepartmentUtilization(BaseModel):
    department: str
    asset_count: int
    average_utilization: float
    share_of_fleet: float


class DashboardMetrics(BaseModel):
    complaint_trends: ComplaintTrends
    pm_compliance: PMCompliance
    calibration_status: CalibrationStatusSummary
    downtime_stats: DowntimeStats
    amc_cmc_updates: ContractUpdates
    utilization_by_department: List[DepartmentUtilization]
    lifecycle_distribution: Dict[str, int]
