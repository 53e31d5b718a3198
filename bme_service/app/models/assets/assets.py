# app/models/assets/assets.py
import uuid
from datetime import datetime
from sqlalchemy import Boolean, Column, String, Date, DateTime, Float, Numeric, JSON, Text
from sqlalchemy.orm import relationship
from shared.core.database import AssetBase


class Asset(AssetBase):
    __tablename__ = "assets"

    id = Column(String(36), primary_key=True,
                default=lambda: str(uuid.uuid4()))
    # external id, referenced by complaints / work orders / PM in the maintenance store
    tag = Column(String(64), unique=True, index=True, nullable=False)
    name = Column(String(200), nullable=False)
    model = Column(String(128))
    manufacturer = Column(String(128))
    # NULL when unknown, never "" (unique index ignores NULLs only)
    serial_number = Column(String(128), unique=True, nullable=True)
    far_number = Column(String(64), unique=True, nullable=True)
    department = Column(String(128), index=True, nullable=False)
    location = Column(String(200))
    status = Column(String(24), default="Active", index=True)

    asset_type = Column(String(64), index=True)
    modality = Column(String(64), index=True)
    criticality = Column(String(16), index=True)
    oem = Column(String(128))
    is_minor_asset = Column(Boolean, default=False, nullable=False)

    lifecycle_state = Column(String(24), default="Active",
                             index=True, nullable=False)
    age_years = Column(Float)
    total_downtime_hours = Column(Float, default=0)
    total_service_cost = Column(Numeric(14, 2, asdecimal=False), default=0)
    utilization_percentage = Column(Float)
    replacement_recommended = Column(
        Boolean, default=False, index=True, nullable=False)
    replacement_reason = Column(Text)

    purchase_date = Column(Date)
    installation_date = Column(Date)
    commissioning_date = Column(Date)
    next_pm_date = Column(Date, index=True)
    next_calibration_date = Column(Date)
    warranty_expiry = Column(Date)
    amc_expiry = Column(Date)
    value = Column(Numeric(14, 2, asdecimal=False))
    image_url = Column(String(500))
    specifications = Column(JSON, default=dict)

    created_by = Column(String(64))  # plain user id, no FK
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow,
                        onupdate=datetime.utcnow, nullable=False)

    contracts = relationship(
        "Contract", secondary="contract_assets", back_populates="assets")
