# app/crud/common/export_crud.py
from datetime import datetime
from typing import Any, Dict, List, Tuple

from sqlalchemy.orm import Session, selectinload

from shared.core.exceptions import ValidationError
from shared.core.schemas import ExportRequestParams, ExportResponse
from shared.exporthelper import export_file_response, export_to_excel
from ...models.assets.contracts import Contract
from ...models.maintenance.complaints import Complaint
from ...schemas.assets.assets_schemas import AssetsRequest
from ...schemas.maintenance.complaints_schemas import ComplaintOut
from ..assets import assets_crud
from ..procurement.contracts_crud import expire_lapsed_contracts, to_contract_out

ASSET_COLUMNS = {
    "tag": "Asset ID",
    "name": "Name",
    "model": "Model",
    "manufacturer": "Manufacturer",
    "serial_number": "Serial Number",
    "far_number": "FAR Number",
    "department": "Department",
    "location": "Location",
    "status": "Status",
    "asset_type": "Type",
    "criticality": "Criticality",
    "lifecycle_state": "Lifecycle State",
    "purchase_date": "Purchase Date",
    "next_pm_date": "Next PM Date",
    "value": "Value",
    "age_years": "Age (Years)",
}

CONTRACT_COLUMNS = {
    "id": "Contract ID",
    "vendor_id": "Vendor",
    "type": "Type",
    "start_date": "Start Date",
    "end_date": "End Date",
    "renewal_date": "Renewal Date",
    "value": "Value",
    "status": "Status",
    "days_until_expiry": "Days Until Expiry",
}

COMPLAINT_COLUMNS = {
    "id": "Complaint ID",
    "asset_tag": "Asset ID",
    "title": "Title",
    "priority": "Priority",
    "status": "Status",
    "reported_by": "Reported By",
    "reported_at": "Reported At",
    "sla_deadline": "SLA Deadline",
    "resolved_at": "Resolved At",
}

EXPORT_TYPES = ("assets", "contracts", "complaints")


def _collect(asset_db: Session, db: Session, type: str, params: ExportRequestParams) -> Tuple[List[Dict[str, Any]], Dict[str, str]]:
    if type == "assets":
        rows = assets_crud.get_assets_for_export(
            asset_db, AssetsRequest(search=params.search))
        return rows, ASSET_COLUMNS

    if type == "contracts":
        expire_lapsed_contracts(asset_db)
        contracts = (
            asset_db.query(Contract)
            .options(selectinload(Contract.assets))
            .order_by(Contract.end_date.asc())
            .all()
        )
        return [to_contract_out(c).model_dump() for c in contracts], CONTRACT_COLUMNS

    if type == "complaints":
        complaints = db.query(Complaint).order_by(
            Complaint.reported_at.desc()).all()
        return [ComplaintOut.model_validate(c).model_dump() for c in complaints], COMPLAINT_COLUMNS

    raise ValidationError(
        f"Unknown export type: {type}. Must be one of: {', '.join(EXPORT_TYPES)}")


def _filename(type: str, extension: str) -> str:
    return f"{type}_export_{datetime.utcnow().strftime('%Y%m%d_%H%M%S')}.{extension}"


def get_export_data(asset_db: Session, db: Session, type: str, params: ExportRequestParams) -> ExportResponse:
    data, column_map = _collect(asset_db, db, type, params)
    return export_to_excel(data, _filename(type, params.format), column_map)


def get_export_file(asset_db: Session, db: Session, type: str, params: ExportRequestParams):
    data, column_map = _collect(asset_db, db, type, params)
    return export_file_response(data, _filename(type, params.format), params.format, column_map)
