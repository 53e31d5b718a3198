# app/models/maintenance/work_orders.py
from datetime import datetime
from sqlalchemy import Column, DateTime, Float, Numeric, String, Text
from shared.core.database import Base


class WorkOrder(Base):
    __tablename__ = "work_orders"

    id = Column(String(64), primary_key=True)
    complaint_id = Column(String(64), index=True, nullable=True)
    asset_tag = Column(String(64), index=True, nullable=True)  # no FK, other store
    assigned_to = Column(String(64))
    assigned_vendor_id = Column(String(64))
    status = Column(String(24), default="Created", index=True)
    labor_hours = Column(Float)
    total_cost = Column(Numeric(14, 2, asdecimal=False))
    notes = Column(Text)
    completed_at = Column(DateTime)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow,
                        onupdate=datetime.utcnow, nullable=False)
