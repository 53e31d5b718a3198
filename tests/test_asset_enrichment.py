# tests/test_asset_enrichment.py
from unittest.mock import MagicMock

from sqlalchemy.exc import OperationalError

from bme_service.app.crud.common.asset_enrichment import (
    enrich_with_asset,
    enrich_with_assets,
)
from bme_service.app.models.maintenance import Complaint


def _broken_session():
    session = MagicMock()
    session.query.side_effect = OperationalError(
        "SELECT assets.tag", {}, Exception("connection refused"))
    return session


class TestBatchEnrichment:
    """Joining maintenance rows with asset projections"""

    def test_single_query_for_many_records(self, asset_db, asset_engine, make_asset, count_queries):
        tags = [make_asset().tag for _ in range(10)]
        records = [{"id": f"C-{i}", "asset_tag": tags[i % 10]} for i in range(50)]

        with count_queries(asset_engine) as statements:
            enriched = enrich_with_assets(asset_db, records)

        assert len(statements) == 1
        assert len(enriched) == 50
        assert all(item["asset"]["tag"] == item["asset_tag"] for item in enriched)

    def test_projection_fields(self, asset_db, make_asset):
        asset = make_asset(name="Infusion Pump", serial_number="SN-1")

        [item] = enrich_with_assets(asset_db, [{"asset_tag": asset.tag}])

        assert item["asset"] == {
            "tag": asset.tag,
            "name": "Infusion Pump",
            "model": "V500",
            "manufacturer": "Draeger",
            "department": "ICU",
            "location": "Bed 1",
            "status": "Active",
        }

    def test_missing_asset_yields_none(self, asset_db, make_asset):
        asset = make_asset()
        records = [{"asset_tag": asset.tag}, {"asset_tag": "AST-GONE"}, {"asset_tag": None}]

        enriched = enrich_with_assets(asset_db, records)

        assert enriched[0]["asset"]["tag"] == asset.tag
        assert enriched[1]["asset"] is None
        assert enriched[2]["asset"] is None

    def test_orm_rows_are_converted(self, asset_db, make_asset):
        asset = make_asset()
        complaint = Complaint(id="COMP-1", asset_tag=asset.tag, title="No power")

        [item] = enrich_with_assets(asset_db, [complaint])

        assert item["id"] == "COMP-1"
        assert item["title"] == "No power"
        assert item["asset"]["name"] == asset.name

    def test_store_failure_degrades_to_none(self):
        records = [{"id": "C-1", "asset_tag": "AST-1"}, {"id": "C-2", "asset_tag": "AST-2"}]

        enriched = enrich_with_assets(_broken_session(), records)

        assert [item["id"] for item in enriched] == ["C-1", "C-2"]
        assert all(item["asset"] is None for item in enriched)

    def test_no_tags_no_query(self, asset_db, asset_engine, count_queries):
        with count_queries(asset_engine) as statements:
            enriched = enrich_with_assets(asset_db, [{"id": "C-1"}, {"id": "C-2", "asset_tag": ""}])

        assert statements == []
        assert [item["asset"] for item in enriched] == [None, None]


class TestSingleEnrichment:
    """Single-record lookup"""

    def test_found(self, asset_db, make_asset):
        asset = make_asset()
        item = enrich_with_asset(asset_db, {"asset_tag": asset.tag})
        assert item["asset"]["tag"] == asset.tag

    def test_without_tag(self, asset_db, asset_engine, count_queries):
        with count_queries(asset_engine) as statements:
            item = enrich_with_asset(asset_db, {"id": "WO-1", "asset_tag": None})
        assert item["asset"] is None
        assert statements == []

    def test_store_failure(self):
        session = _broken_session()
        item = enrich_with_asset(session, {"id": "WO-1", "asset_tag": "AST-1"})
        assert item["asset"] is None
        session.rollback.assert_called_once()
