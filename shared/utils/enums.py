from enum import Enum


class UserRole(str, Enum):
    NORMAL = "normal"
    FULL_ACCESS = "full_access"
    VENDOR = "vendor"
