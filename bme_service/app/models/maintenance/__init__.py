# Import all maintenance-store models so they are registered on Base
from .complaints import Complaint
from .work_orders import WorkOrder
from .preventive_maintenance import PreventiveMaintenance
from .calibrations import Calibration
