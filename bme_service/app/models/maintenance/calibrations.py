# app/models/maintenance/calibrations.py
import uuid
from datetime import datetime
from sqlalchemy import Column, Date, DateTime, String, Text
from shared.core.database import Base


class Calibration(Base):
    __tablename__ = "calibrations"

    id = Column(String(36), primary_key=True,
                default=lambda: str(uuid.uuid4()))
    asset_tag = Column(String(64), index=True, nullable=False)
    calibration_date = Column(Date, nullable=False, index=True)
    next_due_date = Column(Date, nullable=False, index=True)
    vendor_id = Column(String(64))  # vendor in the asset store, no FK
    certificate_url = Column(String(500))
    status = Column(String(24), default="Scheduled", index=True, nullable=False)
    notes = Column(Text)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow,
                        onupdate=datetime.utcnow, nullable=False)
