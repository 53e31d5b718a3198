# app/models/assets/asset_history.py
import uuid
from datetime import datetime
from sqlalchemy import Column, DateTime, Index, JSON, String, Text
from shared.core.database import AssetBase


class AssetHistory(AssetBase):
    """Append-only audit row. Written once, never updated or deleted."""
    __tablename__ = "asset_history"
    __table_args__ = (
        Index("ix_asset_history_asset_event_date", "asset_id", "event_date"),
        Index("ix_asset_history_asset_event_type", "asset_id", "event_type"),
    )

    id = Column(String(36), primary_key=True,
                default=lambda: str(uuid.uuid4()))
    # internal asset id; plain column so history survives an asset delete
    asset_id = Column(String(36), nullable=False, index=True)
    event_type = Column(String(24), nullable=False, index=True)
    event_date = Column(DateTime, default=datetime.utcnow,
                        nullable=False, index=True)
    description = Column(Text)
    performed_by = Column(String(64))
    old_value = Column(Text)
    new_value = Column(Text)
    event_metadata = Column("metadata", JSON, default=dict)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
