# app/models/maintenance/preventive_maintenance.py
import uuid
from datetime import datetime
from sqlalchemy import Column, DateTime, JSON, String, Text
from shared.core.database import Base


class PreventiveMaintenance(Base):
    __tablename__ = "preventive_maintenance"

    id = Column(String(36), primary_key=True,
                default=lambda: str(uuid.uuid4()))
    asset_tag = Column(String(64), index=True, nullable=False)
    scheduled_date = Column(DateTime, nullable=False, index=True)
    completed_date = Column(DateTime)
    technician_id = Column(String(64))
    status = Column(String(24), default="Scheduled", index=True)
    checklist = Column(JSON, default=list)
    notes = Column(Text)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow,
                        onupdate=datetime.utcnow, nullable=False)
