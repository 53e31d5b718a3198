from enum import Enum


class ContractType(str, Enum):

    amc = "AMC"
    cmc = "CMC"
    warranty = "Warranty"
    service = "Service"


class ContractStatus(str, Enum):

    active = "Active"
    expired = "Expired"
    renewed = "Renewed"
    cancelled = "Cancelled"


class ContractExpiryLevel(str, Enum):

    expired = "expired"
    critical = "critical"
    warning = "warning"
    info = "info"


class VendorStatus(str, Enum):

    active = "Active"
    inactive = "Inactive"
    suspended = "Suspended"
