from enum import Enum


class AssetStatus(str, Enum):

    active = "Active"
    maintenance = "Maintenance"
    breakdown = "Breakdown"
    condemned = "Condemned"
    standby = "Standby"
    in_service = "In-Service"
    spare = "Spare"
    disposed = "Disposed"
    demo = "Demo"
    under_service = "Under-Service"


class LifecycleState(str, Enum):

    active = "Active"
    in_service = "In-Service"
    spare = "Spare"
    under_service = "Under-Service"
    demo = "Demo"
    condemned = "Condemned"
    disposed = "Disposed"


class AssetCriticality(str, Enum):

    critical = "Critical"
    high = "High"
    medium = "Medium"
    low = "Low"


class HistoryEventType(str, Enum):

    repair = "Repair"
    move = "Move"
    calibration = "Calibration"
    status_change = "StatusChange"
    pm = "PM"
    complaint = "Complaint"


class Recommendation(str, Enum):

    replace = "Replace"
    monitor = "Monitor"
    maintain = "Maintain"


class ReplacementPriority(str, Enum):

    high = "High"
    medium = "Medium"
    low = "Low"


class UtilizationSource(str, Enum):

    manual = "manual"
    csv = "CSV"


class UtilizationGrouping(str, Enum):

    day = "day"
    week = "week"
    month = "month"
