# app/models/assets/utilization.py
import uuid
from datetime import datetime
from sqlalchemy import Column, Date, DateTime, Float, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import relationship
from shared.core.database import AssetBase


class EquipmentUtilization(AssetBase):
    """One usage entry per asset per day."""
    __tablename__ = "equipment_utilization"
    __table_args__ = (
        UniqueConstraint("asset_id", "date", name="uq_utilization_asset_date"),
    )

    id = Column(String(36), primary_key=True,
                default=lambda: str(uuid.uuid4()))
    asset_id = Column(String(36), ForeignKey("assets.id", ondelete="CASCADE"),
                      nullable=False, index=True)
    date = Column(Date, nullable=False, index=True)
    usage_hours = Column(Float)
    usage_count = Column(Integer)
    recorded_by = Column(String(64))
    source = Column(String(16), default="manual", nullable=False)
    notes = Column(Text)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow,
                        onupdate=datetime.utcnow, nullable=False)

    asset = relationship("Asset")
