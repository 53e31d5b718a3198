# tests/test_assets_crud.py
from datetime import date

import pytest
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.exc import OperationalError

from shared.core.config import settings
from shared.core.exceptions import (
    DuplicateKeyError,
    InvalidTransitionError,
    NotFoundError,
    ValidationError,
)
from bme_service.app.crud.assets import assets_crud
from bme_service.app.enum.asset_enum import AssetStatus
from bme_service.app.models.assets import Asset, AssetHistory
from bme_service.app.schemas.assets.assets_schemas import (
    AssetCreate,
    AssetMoveRequest,
    AssetsRequest,
    AssetUpdate,
)


def new_asset(**overrides) -> AssetCreate:
    data = {"name": "Patient Monitor", "department": "ICU", "location": "Bed 2"}
    data.update(overrides)
    return AssetCreate(**data)


class TestIdentifierSanitizing:
    """Blank and placeholder identifiers become NULL"""

    @pytest.mark.parametrize("raw", [None, "", "   ", "null", "NULL", " undefined ", "N/A", "none"])
    def test_placeholders(self, raw):
        assert assets_crud.sanitize_identifier(raw) is None

    def test_real_values_are_trimmed(self):
        assert assets_crud.sanitize_identifier("  SN-001 ") == "SN-001"


class TestCreateAsset:
    """Asset creation"""

    def test_generated_tag(self, asset_db):
        asset = assets_crud.create_asset(asset_db, new_asset(), created_by="admin-1")

        assert asset.tag.startswith("AST-")
        assert asset.created_by == "admin-1"
        assert asset.lifecycle_state == "Active"
        assert asset.specifications == {}

    def test_explicit_tag_kept(self, asset_db):
        asset = assets_crud.create_asset(asset_db, new_asset(tag="BME-0001"))
        assert asset.tag == "BME-0001"

    def test_placeholder_serials_do_not_collide(self, asset_db):
        first = assets_crud.create_asset(asset_db, new_asset(serial_number="null"))
        second = assets_crud.create_asset(asset_db, new_asset(serial_number=""))
        third = assets_crud.create_asset(asset_db, new_asset(serial_number="undefined"))

        assert first.serial_number is None
        assert second.serial_number is None
        assert third.serial_number is None
        assert asset_db.query(Asset).count() == 3

    def test_duplicate_serial_rejected(self, asset_db):
        assets_crud.create_asset(asset_db, new_asset(serial_number="SN-100"))

        with pytest.raises(DuplicateKeyError) as exc_info:
            assets_crud.create_asset(asset_db, new_asset(serial_number=" SN-100 "))
        assert exc_info.value.status_code == 409

    def test_duplicate_tag_rejected(self, asset_db):
        assets_crud.create_asset(asset_db, new_asset(tag="BME-1"))
        with pytest.raises(DuplicateKeyError):
            assets_crud.create_asset(asset_db, new_asset(tag="BME-1"))

    def test_negative_value_rejected(self, asset_db):
        with pytest.raises(ValidationError):
            assets_crud.create_asset(asset_db, new_asset(value=-5))

    @pytest.mark.parametrize("field", ["total_service_cost", "total_downtime_hours"])
    def test_negative_counters_rejected(self, field):
        with pytest.raises(PydanticValidationError):
            new_asset(**{field: -0.5})

    def test_age_derived_from_purchase_date(self, asset_db):
        asset = assets_crud.create_asset(
            asset_db, new_asset(purchase_date=date(2015, 1, 1)))
        assert asset.age_years > 9


class TestUpdateAsset:
    """Asset updates and change tracking"""

    def test_changes_tracked_per_field(self, asset_db, make_asset):
        asset = make_asset()

        updated = assets_crud.update_asset(asset_db, asset.tag, AssetUpdate(
            status=AssetStatus.breakdown, location="Bed 9", name=asset.name,
            performed_by="tech-1"))

        assert updated.status == "Breakdown"
        events = asset_db.query(AssetHistory).all()
        assert {(e.event_type, e.event_metadata["field"]) for e in events} == {
            ("StatusChange", "status"), ("Move", "location")}

    def test_untracked_without_actor(self, asset_db, make_asset):
        asset = make_asset()
        assets_crud.update_asset(asset_db, asset.tag, AssetUpdate(location="Bed 9"))
        assert asset_db.query(AssetHistory).count() == 0

    def test_lifecycle_change_validated(self, asset_db, make_asset):
        asset = make_asset(lifecycle_state="Disposed")

        with pytest.raises(InvalidTransitionError):
            assets_crud.update_asset(asset_db, asset.tag, AssetUpdate(lifecycle_state="Active"))

    def test_serial_collision_with_other_asset(self, asset_db, make_asset):
        make_asset(serial_number="SN-1")
        other = make_asset(serial_number="SN-2")

        with pytest.raises(DuplicateKeyError):
            assets_crud.update_asset(asset_db, other.tag, AssetUpdate(serial_number="SN-1"))

    def test_keeping_own_serial_is_allowed(self, asset_db, make_asset):
        asset = make_asset(serial_number="SN-1")
        updated = assets_crud.update_asset(
            asset_db, asset.tag, AssetUpdate(serial_number="SN-1", model="V600"))
        assert updated.model == "V600"

    def test_required_fields_not_nulled(self, asset_db, make_asset):
        asset = make_asset()
        updated = assets_crud.update_asset(asset_db, asset.tag, AssetUpdate(name=None))
        assert updated.name == asset.name

    def test_unknown_asset(self, asset_db):
        with pytest.raises(NotFoundError):
            assets_crud.update_asset(asset_db, "AST-NOPE", AssetUpdate(model="X"))

    def test_history_failure_does_not_undo_update(self, asset_db, make_asset, monkeypatch):
        asset = make_asset()

        def _broken_history(*args, **kwargs):
            raise OperationalError("INSERT INTO asset_history", {}, Exception("audit store down"))

        monkeypatch.setattr(assets_crud, "track_asset_update", _broken_history)

        updated = assets_crud.update_asset(asset_db, asset.tag, AssetUpdate(
            location="R2", performed_by="tech-1"))

        assert updated.location == "R2"
        asset_db.expire_all()
        assert asset_db.query(Asset).filter(Asset.tag == asset.tag).one().location == "R2"
        assert asset_db.query(AssetHistory).count() == 0

    @pytest.mark.parametrize("field", ["total_service_cost", "total_downtime_hours"])
    def test_negative_counters_rejected(self, field):
        with pytest.raises(PydanticValidationError):
            AssetUpdate(**{field: -1})


class TestListAndDelete:
    """Listing, filtering and deletion"""

    def test_filters_and_total(self, asset_db, make_asset):
        make_asset(department="ICU", name="Ventilator A")
        make_asset(department="Radiology", name="X-Ray")
        make_asset(department="ICU", name="Ventilator B", lifecycle_state="Spare")

        result = assets_crud.get_assets(asset_db, AssetsRequest(department="ICU"))
        assert result.total == 2

        result = assets_crud.get_assets(asset_db, AssetsRequest(search="x-ray"))
        assert [a.name for a in result.assets] == ["X-Ray"]

        result = assets_crud.get_assets(asset_db, AssetsRequest(lifecycle_state="Spare"))
        assert [a.name for a in result.assets] == ["Ventilator B"]

    def test_pagination(self, asset_db, make_asset):
        for _ in range(5):
            make_asset()
        result = assets_crud.get_assets(asset_db, AssetsRequest(skip=3, limit=10))
        assert result.total == 5
        assert len(result.assets) == 2

    def test_delete(self, asset_db, make_asset):
        tag = make_asset().tag
        assets_crud.delete_asset(asset_db, tag)
        with pytest.raises(NotFoundError):
            assets_crud.get_asset(asset_db, tag)


class TestMaintenanceOperations:
    """Serial cleanup, moves and QR details"""

    def test_cleanup_serial_numbers(self, asset_db, make_asset):
        make_asset(serial_number="null")
        make_asset(serial_number=" N/A ", far_number="undefined")
        kept = make_asset(serial_number="SN-9")

        result = assets_crud.cleanup_serial_numbers(asset_db)

        assert result.serial_numbers_cleared == 2
        assert result.far_numbers_cleared == 1
        assert asset_db.query(Asset).filter(Asset.serial_number != None).count() == 1
        asset_db.refresh(kept)
        assert kept.serial_number == "SN-9"

    def test_move_records_one_event(self, asset_db, make_asset):
        asset = make_asset()

        moved = assets_crud.move_asset(asset_db, asset.tag, AssetMoveRequest(
            to_location="OT 3", reason="Surgery", moved_by="tech-1"))

        assert moved.location == "OT 3"
        assert moved.department == "ICU"
        [event] = asset_db.query(AssetHistory).all()
        assert event.event_type == "Move"
        assert event.description == "Moved from Bed 1 to OT 3. Reason: Surgery"

    def test_move_needs_a_target(self, asset_db, make_asset):
        asset = make_asset()
        with pytest.raises(ValidationError):
            assets_crud.move_asset(asset_db, asset.tag, AssetMoveRequest(reason="?"))

    def test_qr_details(self, asset_db, make_asset):
        asset = make_asset()

        details = assets_crud.get_qr_details(asset_db, asset.tag)

        base_url = settings.APP_BASE_URL.rstrip("/")
        assert details.url == f"{base_url}/qr/{asset.tag}"
        assert details.asset.tag == asset.tag
        assert [a.label for a in details.actions] == [
            "Raise Complaint", "View History", "View PM Schedule"]


class TestBulkUpload:
    """CSV import"""

    def test_header_aliases_and_placeholders(self, asset_db):
        content = (
            "Asset ID,Name,Department,Serial Number,Age (Years),Purchase Date\n"
            "BME-1,Ventilator,ICU,SN-1,99,2019-04-01\n"
            "BME-2,Monitor,ICU,null,3,\n"
            "BME-3,Pump,ICU,,,\n"
        ).encode()

        result = assets_crud.bulk_upload_assets(asset_db, content, created_by="admin-1")

        assert (result.total, result.successful, result.failed) == (3, 3, 0)
        first = asset_db.query(Asset).filter(Asset.tag == "BME-1").one()
        assert first.serial_number == "SN-1"
        assert first.age_years < 99
        assert asset_db.query(Asset).filter(Asset.serial_number == None).count() == 2

    def test_invalid_rows_reported_with_line_numbers(self, asset_db):
        content = (
            "Name,Department,Status\n"
            "Ventilator,ICU,Active\n"
            ",ICU,Active\n"
            "Monitor,ICU,Broken\n"
        ).encode()

        result = assets_crud.bulk_upload_assets(asset_db, content)

        assert result.successful == 1
        assert result.failed == 2
        assert [e.row for e in result.errors] == [3, 4]

    def test_duplicates_skipped(self, asset_db, make_asset):
        make_asset(tag="BME-1")
        content = b"Asset ID,Name,Department\nBME-1,Ventilator,ICU\nBME-2,Monitor,ICU\n"

        result = assets_crud.bulk_upload_assets(asset_db, content)

        assert result.duplicates == 1
        assert result.failed == 0
        assert result.successful == 1

    def test_duplicates_reported_when_not_skipped(self, asset_db, make_asset):
        make_asset(tag="BME-1")
        content = b"Asset ID,Name,Department\nBME-1,Ventilator,ICU\n"

        result = assets_crud.bulk_upload_assets(asset_db, content, skip_duplicates=False)

        assert result.duplicates == 1
        assert result.failed == 1
        assert result.errors[0].row == 2

    def test_validate_only_writes_nothing(self, asset_db):
        content = b"Name,Department\nVentilator,ICU\nMonitor,ICU\n"

        result = assets_crud.bulk_upload_assets(asset_db, content, validate_only=True)

        assert result.successful == 2
        assert asset_db.query(Asset).count() == 0
