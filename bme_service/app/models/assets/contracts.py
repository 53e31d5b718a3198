# app/models/assets/contracts.py
import uuid
from datetime import datetime
from sqlalchemy import Column, Date, DateTime, ForeignKey, JSON, Numeric, String, Table, Text
from sqlalchemy.orm import relationship
from shared.core.database import AssetBase


contract_assets = Table(
    "contract_assets",
    AssetBase.metadata,
    Column("contract_id", String(36), ForeignKey(
        "contracts.id", ondelete="CASCADE"), primary_key=True),
    Column("asset_id", String(36), ForeignKey(
        "assets.id", ondelete="CASCADE"), primary_key=True),
)


class Contract(AssetBase):
    __tablename__ = "contracts"

    id = Column(String(36), primary_key=True,
                default=lambda: str(uuid.uuid4()))
    vendor_id = Column(String(64), nullable=False, index=True)
    type = Column(String(16), nullable=False, index=True)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False, index=True)
    value = Column(Numeric(14, 2, asdecimal=False), nullable=False, default=0)
    renewal_date = Column(Date)
    status = Column(String(16), default="Active", index=True, nullable=False)
    documents = Column(JSON, default=list)
    notes = Column(Text)
    created_by = Column(String(64))

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow,
                        onupdate=datetime.utcnow, nullable=False)

    assets = relationship("Asset", secondary=contract_assets,
                          back_populates="contracts")
