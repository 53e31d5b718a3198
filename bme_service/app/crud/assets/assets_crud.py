# app/crud/assets/assets_crud.py
import logging
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from shared.core.config import settings
from shared.core.exceptions import DuplicateKeyError, NotFoundError, ValidationError
from shared.exporthelper import read_csv_rows
from ...enum.asset_enum import LifecycleState
from ...models.assets.assets import Asset
from ..common.id_generator import generate_prefixed_id
from ...schemas.assets.assets_schemas import (
    AssetCreate,
    AssetListResponse,
    AssetMoveRequest,
    AssetOut,
    AssetProjection,
    AssetsRequest,
    AssetUpdate,
    BulkUploadResult,
    BulkUploadRowError,
    QRAction,
    QRDetailsOut,
    SerialCleanupResult,
)
from .asset_history_crud import track_asset_move, track_asset_update
from .lifecycle_analysis import calculate_asset_age
from .lifecycle_crud import validate_transition

logger = logging.getLogger(__name__)

# values forms and spreadsheets send for "no serial number"
IDENTIFIER_PLACEHOLDERS = {"null", "undefined", "none", "n/a", "na"}
UNIQUE_IDENTIFIERS = ("serial_number", "far_number")
NOT_NULL_FIELDS = ("name", "department", "status", "lifecycle_state", "is_minor_asset")

BULK_HEADER_MAP = {
    "Asset ID": "tag", "asset id": "tag", "asset_id": "tag", "id": "tag",
    "Name": "name",
    "Model": "model",
    "Manufacturer": "manufacturer",
    "Serial Number": "serial_number", "serial number": "serial_number", "serialNumber": "serial_number",
    "Department": "department",
    "Location": "location",
    "Status": "status",
    "Type": "asset_type", "type": "asset_type", "assetType": "asset_type",
    "Criticality": "criticality",
    "Lifecycle State": "lifecycle_state", "lifecycleState": "lifecycle_state",
    "FAR Number": "far_number", "farNumber": "far_number",
    "Purchase Date": "purchase_date", "purchaseDate": "purchase_date",
    "Next PM Date": "next_pm_date", "nextPmDate": "next_pm_date",
    "Value": "value",
    "Age (Years)": "age_years", "age (years)": "age_years", "ageYears": "age_years",
}


def sanitize_identifier(value: Optional[str]) -> Optional[str]:
    """Return a trimmed identifier, or None for blank and placeholder values."""
    if value is None:
        return None
    cleaned = str(value).strip()
    if cleaned == "" or cleaned.lower() in IDENTIFIER_PLACEHOLDERS:
        return None
    return cleaned


def generate_asset_tag(db: Session) -> str:
    return generate_prefixed_id(db, Asset.tag, "AST")


def _enum_values(data: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v.value if isinstance(v, Enum) else v for k, v in data.items()}


def get_asset_by_tag(db: Session, tag: str) -> Optional[Asset]:
    return db.query(Asset).filter(Asset.tag == tag).first()


def get_asset_or_404(db: Session, tag: str) -> Asset:
    asset = get_asset_by_tag(db, tag)
    if not asset:
        raise NotFoundError(f"Asset with ID {tag} not found")
    return asset


def _check_duplicates(db: Session, data: Dict[str, Any], exclude_id: Optional[str] = None):
    checks = [
        ("tag", Asset.tag, "Asset ID"),
        ("serial_number", Asset.serial_number, "Serial number"),
        ("far_number", Asset.far_number, "FAR number"),
    ]
    for key, column, label in checks:
        value = data.get(key)
        if not value:
            continue
        query = db.query(Asset.id).filter(column == value)
        if exclude_id:
            query = query.filter(Asset.id != exclude_id)
        if query.first():
            raise DuplicateKeyError(f"{label} '{value}' already exists")


def _commit_or_duplicate(db: Session):
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        logger.warning("Unique constraint violated on asset write: %s", e.orig)
        raise DuplicateKeyError(
            "Asset ID, serial number or FAR number already exists")


# ----------------------------------------------------------------------
# CRUD OPERATIONS
# ----------------------------------------------------------------------

def build_asset_filters(params: AssetsRequest):
    filters = []

    if params.search:
        search_term = f"%{params.search}%"
        filters.append(or_(
            Asset.tag.ilike(search_term),
            Asset.name.ilike(search_term),
            Asset.serial_number.ilike(search_term),
        ))

    if params.department and params.department.lower() != "all":
        filters.append(Asset.department == params.department)

    if params.status and params.status.lower() != "all":
        filters.append(Asset.status == params.status)

    if params.lifecycle_state and params.lifecycle_state.lower() != "all":
        filters.append(Asset.lifecycle_state == params.lifecycle_state)

    if params.criticality and params.criticality.lower() != "all":
        filters.append(Asset.criticality == params.criticality)

    if params.replacement_recommended is not None:
        filters.append(Asset.replacement_recommended ==
                       params.replacement_recommended)

    return filters


def get_assets(db: Session, params: AssetsRequest) -> AssetListResponse:
    base_query = db.query(Asset).filter(*build_asset_filters(params))
    total = base_query.with_entities(func.count(Asset.id)).scalar()

    results = (
        base_query
        .order_by(Asset.updated_at.desc())
        .offset(params.skip)
        .limit(params.limit)
        .all()
    )

    return AssetListResponse(
        assets=[AssetOut.model_validate(asset) for asset in results],
        total=total,
    )


def get_asset(db: Session, tag: str) -> AssetOut:
    return AssetOut.model_validate(get_asset_or_404(db, tag))


def create_asset(db: Session, asset: AssetCreate, created_by: Optional[str] = None) -> Asset:
    data = _enum_values(asset.model_dump())

    for key in UNIQUE_IDENTIFIERS:
        data[key] = sanitize_identifier(data.get(key))

    if data.get("value") is not None and data["value"] < 0:
        raise ValidationError("Value must be a valid positive number")

    data["tag"] = sanitize_identifier(data.get("tag")) or generate_asset_tag(db)
    _check_duplicates(db, data)

    data["age_years"] = calculate_asset_age(data.get("purchase_date"))
    data["specifications"] = data.get("specifications") or {}

    db_asset = Asset(**data, created_by=created_by)
    db.add(db_asset)
    _commit_or_duplicate(db)
    db.refresh(db_asset)

    logger.info("Asset %s created", db_asset.tag)
    return db_asset


def update_asset(db: Session, tag: str, asset_update: AssetUpdate) -> Asset:
    db_asset = get_asset_or_404(db, tag)
    update_data = asset_update.model_dump(
        exclude_unset=True, exclude={"performed_by"})

    for key in UNIQUE_IDENTIFIERS:
        if key in update_data:
            update_data[key] = sanitize_identifier(update_data[key])

    if update_data.get("value") is not None and update_data["value"] < 0:
        raise ValidationError("Value must be a valid positive number")

    new_state = update_data.get("lifecycle_state")
    if new_state is not None:
        new_state = LifecycleState(new_state).value
        if new_state != db_asset.lifecycle_state:
            validate_transition(db_asset.lifecycle_state, new_state)

    update_data = _enum_values(update_data)
    for key in NOT_NULL_FIELDS:
        if key in update_data and update_data[key] is None:
            update_data.pop(key)

    _check_duplicates(db, update_data, exclude_id=db_asset.id)

    changes = {}
    for field, value in update_data.items():
        old = getattr(db_asset, field)
        if old != value:
            changes[field] = {"old": old, "new": value}
        setattr(db_asset, field, value)

    db_asset.age_years = calculate_asset_age(db_asset.purchase_date)
    _commit_or_duplicate(db)
    db.refresh(db_asset)

    if asset_update.performed_by and changes:
        try:
            track_asset_update(db, tag, changes, asset_update.performed_by)
        except SQLAlchemyError:
            db.rollback()
            logger.exception("Failed to record update history for asset %s", tag)

    return db_asset


def delete_asset(db: Session, tag: str) -> None:
    """Hard delete. History rows reference the asset weakly and are kept."""
    db_asset = get_asset_or_404(db, tag)
    db.delete(db_asset)
    db.commit()
    logger.info("Asset %s deleted", tag)


def cleanup_serial_numbers(db: Session) -> SerialCleanupResult:
    """Rewrite stored blank / placeholder serial and FAR numbers to NULL."""
    placeholders = list(IDENTIFIER_PLACEHOLDERS) + [""]
    cleared = {}

    for key in UNIQUE_IDENTIFIERS:
        column = getattr(Asset, key)
        cleared[key] = (
            db.query(Asset)
            .filter(column != None, func.lower(func.trim(column)).in_(placeholders))
            .update({column: None}, synchronize_session=False)
        )

    db.commit()
    logger.info("Serial cleanup: %d serial numbers, %d FAR numbers cleared",
                cleared["serial_number"], cleared["far_number"])

    return SerialCleanupResult(
        serial_numbers_cleared=cleared["serial_number"],
        far_numbers_cleared=cleared["far_number"],
    )


def move_asset(db: Session, tag: str, request: AssetMoveRequest) -> Asset:
    db_asset = get_asset_or_404(db, tag)
    if not request.to_location and not request.to_department:
        raise ValidationError("Either to_location or to_department is required")

    from_location, from_department = db_asset.location, db_asset.department
    if request.to_location:
        db_asset.location = request.to_location
    if request.to_department:
        db_asset.department = request.to_department
    db.commit()
    db.refresh(db_asset)

    track_asset_move(
        db, tag,
        from_location=from_location,
        to_location=request.to_location,
        from_department=from_department,
        to_department=request.to_department,
        reason=request.reason,
        moved_by=request.moved_by,
    )
    return db_asset


def get_qr_details(db: Session, tag: str) -> QRDetailsOut:
    db_asset = get_asset_or_404(db, tag)
    base_url = settings.APP_BASE_URL.rstrip("/")

    return QRDetailsOut(
        url=f"{base_url}/qr/{db_asset.tag}",
        asset=AssetProjection.model_validate(db_asset),
        actions=[
            QRAction(label="Raise Complaint",
                     url=f"{base_url}/complaints?asset_tag={db_asset.tag}"),
            QRAction(label="View History",
                     url=f"{base_url}/assets/{db_asset.tag}/maintenance"),
            QRAction(label="View PM Schedule",
                     url=f"{base_url}/pm?asset_tag={db_asset.tag}"),
        ],
    )


# ----------------------------------------------------------------------
# BULK UPLOAD
# ----------------------------------------------------------------------

def _validation_messages(error: PydanticValidationError) -> List[str]:
    messages = []
    for err in error.errors():
        field = ".".join(str(part) for part in err.get("loc", ()))
        messages.append(f"{field}: {err.get('msg')}" if field else err.get("msg"))
    return messages


def bulk_upload_assets(
    db: Session,
    content: bytes,
    created_by: Optional[str] = None,
    validate_only: bool = False,
    skip_duplicates: bool = True,
) -> BulkUploadResult:
    rows = read_csv_rows(content, BULK_HEADER_MAP)
    result = BulkUploadResult(
        total=len(rows), successful=0, failed=0, duplicates=0, errors=[])

    for index, row in enumerate(rows, start=2):  # row 1 is the header
        # age is always derived from purchase date
        row.pop("age_years", None)
        for key in UNIQUE_IDENTIFIERS:
            if key in row:
                row[key] = sanitize_identifier(row[key])

        try:
            payload = AssetCreate.model_validate(row)
        except PydanticValidationError as e:
            result.failed += 1
            result.errors.append(BulkUploadRowError(
                row=index, data=row, errors=_validation_messages(e)))
            continue

        if validate_only:
            result.successful += 1
            continue

        try:
            create_asset(db, payload, created_by)
            result.successful += 1
        except DuplicateKeyError as e:
            result.duplicates += 1
            if not skip_duplicates:
                result.failed += 1
                result.errors.append(BulkUploadRowError(
                    row=index, data=row, errors=[e.detail]))
        except ValidationError as e:
            result.failed += 1
            result.errors.append(BulkUploadRowError(
                row=index, data=row, errors=[e.detail]))

    logger.info("Bulk upload: %d rows, %d created, %d failed, %d duplicates",
                result.total, result.successful, result.failed, result.duplicates)
    return result


# ----------------------------------------------------------------------
# EXPORT
# ----------------------------------------------------------------------

def get_assets_for_export(db: Session, params: AssetsRequest) -> List[Dict[str, Any]]:
    rows = (
        db.query(Asset)
        .filter(*build_asset_filters(params))
        .order_by(Asset.tag.asc())
        .all()
    )
    return [AssetOut.model_validate(row).model_dump() for row in rows]
