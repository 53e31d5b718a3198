from enum import Enum


class ComplaintStatus(str, Enum):

    open = "Open"
    in_progress = "In Progress"
    resolved = "Resolved"
    closed = "Closed"
    escalated = "Escalated"


class ComplaintPriority(str, Enum):

    low = "Low"
    medium = "Medium"
    high = "High"
    critical = "Critical"


class WorkOrderStatus(str, Enum):

    created = "Created"
    assigned = "Assigned"
    in_progress = "In Progress"
    completed = "Completed"
    closed = "Closed"
    cancelled = "Cancelled"


class PMStatus(str, Enum):

    scheduled = "Scheduled"
    in_progress = "In Progress"
    completed = "Completed"
    overdue = "Overdue"
    cancelled = "Cancelled"


class CalibrationStatus(str, Enum):

    scheduled = "Scheduled"
    in_progress = "In Progress"
    completed = "Completed"
    expired = "Expired"
    overdue = "Overdue"
