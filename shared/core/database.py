from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base
from shared.core.config import ASSET_DATABASE_URL, MAINTENANCE_DATABASE_URL

# Separate bases: the two stores are never joined or migrated together
AssetBase = declarative_base()
Base = declarative_base()

POOL_SIZE = 2
MAX_OVERFLOW = 2


def _engine_options(url: str) -> dict:
    if url.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}}
    return {
        "pool_pre_ping": True,
        "pool_recycle": 300,
        "pool_size": POOL_SIZE,          # max idle connections
        "max_overflow": MAX_OVERFLOW,    # max temporary extra connections
        "pool_timeout": 30,              # wait time before failing
    }


# Asset DB (assets, history, contracts)
asset_engine = create_engine(
    ASSET_DATABASE_URL, **_engine_options(ASSET_DATABASE_URL))
AssetSessionLocal = sessionmaker(
    autocommit=False, autoflush=False, bind=asset_engine)

# Maintenance DB (complaints, work orders, PM)
maintenance_engine = create_engine(
    MAINTENANCE_DATABASE_URL, **_engine_options(MAINTENANCE_DATABASE_URL))
MaintenanceSessionLocal = sessionmaker(
    autocommit=False, autoflush=False, bind=maintenance_engine)


# Dependency


def get_asset_db():
    db = AssetSessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_maintenance_db():
    db = MaintenanceSessionLocal()
    try:
        yield db
    finally:
        db.close()
