# app/models/assets/vendors.py
from datetime import datetime
from sqlalchemy import Column, DateTime, Float, JSON, String, Text
from shared.core.database import AssetBase


class Vendor(AssetBase):
    __tablename__ = "vendors"

    # VEND-<epoch ms>; contracts and calibrations hold it as a plain string
    id = Column(String(64), primary_key=True)
    name = Column(String(200), nullable=False, index=True)
    contact_person = Column(String(200))
    email = Column(String(200), index=True)
    phone = Column(String(32))
    address = Column(Text)
    rating = Column(Float, default=0)
    performance_score = Column(Float, default=0, index=True)
    escalation_matrix = Column(JSON, default=list)
    status = Column(String(16), default="Active", index=True, nullable=False)
    created_by = Column(String(64))

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow,
                        onupdate=datetime.utcnow, nullable=False)
