# app/models/maintenance/complaints.py
from datetime import datetime
from sqlalchemy import Column, DateTime, Integer, JSON, String, Text
from shared.core.database import Base


class Complaint(Base):
    __tablename__ = "complaints"

    id = Column(String(64), primary_key=True)
    # weak reference to Asset.tag in the asset store, not a foreign key
    asset_tag = Column(String(64), index=True, nullable=True)
    title = Column(String(200), nullable=False)
    description = Column(Text)
    priority = Column(String(16), default="Medium", index=True)
    status = Column(String(24), default="Open", index=True)
    reported_by = Column(String(64), index=True)
    assigned_to = Column(String(64), index=True)
    reported_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    responded_at = Column(DateTime)
    resolved_at = Column(DateTime)
    sla_deadline = Column(DateTime)
    downtime_minutes = Column(Integer)
    root_cause = Column(Text)
    resolution = Column(Text)
    before_images = Column(JSON, default=list)
    after_images = Column(JSON, default=list)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow,
                        onupdate=datetime.utcnow, nullable=False)
