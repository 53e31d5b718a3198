# Import all asset-store models so they are registered on AssetBase
from .assets import Asset
from .asset_history import AssetHistory
from .contracts import Contract, contract_assets
from .utilization import EquipmentUtilization
from .vendors import Vendor
