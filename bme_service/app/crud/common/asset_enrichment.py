# app/crud/common/asset_enrichment.py
"""
Merge asset projections from the asset store into maintenance-store rows.

Complaints, work orders and PM rows point at an asset through ``asset_tag``
only. The asset may have been deleted, or the asset store may be down; in
both cases the row is still returned, with ``asset`` set to None.
"""
import logging
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy import inspect
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from shared.core.exceptions import UpstreamLookupFailure
from ...models.assets.assets import Asset
from ...schemas.assets.assets_schemas import AssetProjection

logger = logging.getLogger(__name__)

PROJECTION_COLUMNS = (
    Asset.tag,
    Asset.name,
    Asset.model,
    Asset.manufacturer,
    Asset.department,
    Asset.location,
    Asset.status,
)


def row_to_dict(record: Any) -> Dict[str, Any]:
    if isinstance(record, dict):
        return dict(record)
    return {attr.key: getattr(record, attr.key)
            for attr in inspect(record).mapper.column_attrs}


def _lookup_assets(asset_db: Session, tags: Iterable[str]) -> Dict[str, Dict[str, Any]]:
    tags = list(tags)
    if not tags:
        return {}
    try:
        rows = asset_db.query(*PROJECTION_COLUMNS).filter(
            Asset.tag.in_(tags)).all()
    except SQLAlchemyError as e:
        asset_db.rollback()
        raise UpstreamLookupFailure(str(e)) from e

    return {
        row.tag: AssetProjection.model_validate(dict(row._mapping)).model_dump()
        for row in rows
    }


def enrich_with_asset(asset_db: Session, record: Any) -> Dict[str, Any]:
    data = row_to_dict(record)
    tag: Optional[str] = data.get("asset_tag")
    data["asset"] = None
    if not tag:
        return data

    try:
        data["asset"] = _lookup_assets(asset_db, [tag]).get(tag)
    except UpstreamLookupFailure as e:
        logger.warning("Asset lookup failed for %s: %s", tag, e)
    return data


def enrich_with_assets(asset_db: Session, records: Iterable[Any]) -> List[Dict[str, Any]]:
    """Batch variant: a single IN query for every distinct tag across ``records``."""
    items = [row_to_dict(record) for record in records]
    tags = {item.get("asset_tag") for item in items if item.get("asset_tag")}

    try:
        assets = _lookup_assets(asset_db, tags)
    except UpstreamLookupFailure as e:
        logger.warning("Batch asset lookup failed for %d tags: %s", len(tags), e)
        assets = {}

    for item in items:
        item["asset"] = assets.get(item.get("asset_tag"))
    return items
