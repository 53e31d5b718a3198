# tests/test_vendors.py
from datetime import date, timedelta

import pytest
from pydantic import ValidationError as PydanticValidationError

from shared.core.exceptions import NotFoundError, ValidationError
from bme_service.app.crud.procurement import contracts_crud, vendors_crud
from bme_service.app.models.assets import Contract
from bme_service.app.schemas.procurement.vendors_schemas import (
    VendorCreate,
    VendorRequest,
    VendorUpdate,
)

TODAY = date(2024, 6, 1)


def register(db, **overrides):
    data = {"name": "MedServ", "email": "Support@MedServ.example"}
    data.update(overrides)
    return vendors_crud.create_vendor(db, VendorCreate(**data), created_by="admin-1")


def add_contract(db, vendor_id, end_date, status="Active", value=1000):
    contract = Contract(vendor_id=vendor_id, type="AMC", status=status, value=value,
                        start_date=end_date - timedelta(days=365), end_date=end_date)
    db.add(contract)
    db.commit()
    return contract


class TestRegistry:
    """Vendor registration and lookup"""

    def test_create(self, asset_db):
        vendor = register(asset_db, escalation_matrix=[
            {"level": 1, "name": "Desk", "email": "desk@medserv.example", "phone": "100"}])

        assert vendor.id.startswith("VEND-")
        assert vendor.email == "support@medserv.example"
        assert vendor.status == "Active"
        assert vendor.escalation_matrix[0].level == 1
        assert vendor.created_by == "admin-1"

    def test_invalid_email_rejected(self):
        with pytest.raises(PydanticValidationError):
            VendorCreate(name="Acme", email="not-an-email")

    def test_rating_bounds(self):
        with pytest.raises(PydanticValidationError):
            VendorCreate(name="Acme", rating=6)

    def test_list_sorted_and_filtered(self, asset_db):
        first = register(asset_db, name="Alpha", rating=2)
        second = register(asset_db, name="Beta", rating=4.5)
        register(asset_db, name="Gamma", rating=1, status="Suspended")
        add_contract(asset_db, second.id, TODAY + timedelta(days=30))

        result = vendors_crud.get_vendors(asset_db, VendorRequest(
            min_rating=2, sort_by="rating", sort_order="desc"))

        assert [v.id for v in result.vendors] == [second.id, first.id]
        assert result.vendors[0].active_contracts_count == 1

        result = vendors_crud.get_vendors(asset_db, VendorRequest(status="Suspended"))
        assert [v.name for v in result.vendors] == ["Gamma"]

    def test_update(self, asset_db):
        vendor = register(asset_db)

        updated = vendors_crud.update_vendor(asset_db, vendor.id, VendorUpdate(
            performance_score=88, status="Inactive", name=None))

        assert updated.performance_score == 88
        assert updated.status == "Inactive"
        assert updated.name == "MedServ"

    def test_unknown_vendor(self, asset_db):
        with pytest.raises(NotFoundError):
            vendors_crud.get_vendor(asset_db, "VEND-0")

    def test_delete_blocked_by_active_contract(self, asset_db):
        vendor = register(asset_db)
        add_contract(asset_db, vendor.id, TODAY + timedelta(days=30))

        with pytest.raises(ValidationError):
            vendors_crud.delete_vendor(asset_db, vendor.id)

    def test_delete(self, asset_db):
        vendor = register(asset_db)
        add_contract(asset_db, vendor.id, TODAY, status="Expired")

        vendors_crud.delete_vendor(asset_db, vendor.id)

        with pytest.raises(NotFoundError):
            vendors_crud.get_vendor(asset_db, vendor.id)


class TestPerformance:
    """Contract metrics per vendor"""

    def test_metrics(self, asset_db):
        vendor = register(asset_db, rating=4, performance_score=70)
        add_contract(asset_db, vendor.id, TODAY + timedelta(days=45), value=3000)
        add_contract(asset_db, vendor.id, TODAY + timedelta(days=200), value=1000)
        add_contract(asset_db, vendor.id, TODAY - timedelta(days=2), value=2000)
        add_contract(asset_db, vendor.id, TODAY - timedelta(days=400), status="Expired")
        add_contract(asset_db, vendor.id, TODAY - timedelta(days=30), status="Renewed")

        perf = vendors_crud.get_vendor_performance(asset_db, vendor.id, today=TODAY)

        assert perf.total_contracts == 5
        assert perf.active_contracts == 3
        assert perf.expired_contracts == 1
        assert perf.total_contract_value == 6000
        assert perf.average_contract_value == 2000
        assert perf.expiring_soon == 1
        assert perf.expired == 1
        assert perf.contract_renewal_rate == 20.0
        assert perf.rating == 4

    def test_no_contracts(self, asset_db):
        vendor = register(asset_db)

        perf = vendors_crud.get_vendor_performance(asset_db, vendor.id, today=TODAY)

        assert perf.total_contracts == 0
        assert perf.contract_renewal_rate == 0
        assert perf.average_contract_value == 0

    def test_vendor_contracts(self, asset_db):
        vendor = register(asset_db)
        other = register(asset_db, name="Other")
        later = add_contract(asset_db, vendor.id, TODAY + timedelta(days=90))
        sooner = add_contract(asset_db, vendor.id, TODAY + timedelta(days=10))
        add_contract(asset_db, other.id, TODAY + timedelta(days=10))

        contracts = vendors_crud.get_vendor_contracts(asset_db, vendor.id)

        assert [c.id for c in contracts] == [sooner.id, later.id]


class TestRenewalReminders:
    """Reminders at 90, 60 and 30 days before contract end"""

    def test_marks(self, asset_db):
        vendor = register(asset_db)
        at_ninety = add_contract(asset_db, vendor.id, TODAY + timedelta(days=88))
        add_contract(asset_db, vendor.id, TODAY + timedelta(days=62))
        at_thirty = add_contract(asset_db, "VEND-UNKNOWN", TODAY + timedelta(days=30))
        add_contract(asset_db, vendor.id, TODAY + timedelta(days=100))
        add_contract(asset_db, vendor.id, TODAY + timedelta(days=29), status="Renewed")

        result = contracts_crud.get_renewal_reminders(asset_db, today=TODAY)

        assert result.count == 2
        assert [(r.contract_id, r.reminder_day, r.days_until_expiry) for r in result.reminders] == [
            (at_thirty.id, 30, 30), (at_ninety.id, 90, 88)]
        assert result.reminders[0].vendor_name is None
        assert result.reminders[1].vendor_name == "MedServ"

    def test_lapsed_contracts_skipped(self, asset_db):
        add_contract(asset_db, "VEND-1", TODAY - timedelta(days=1))

        assert contracts_crud.get_renewal_reminders(asset_db, today=TODAY).count == 0
