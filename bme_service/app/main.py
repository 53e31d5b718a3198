import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from shared.core.config import settings
from shared.core.database import AssetBase, Base, asset_engine, maintenance_engine
from shared.exception_handler import setup_exception_handlers

from .models import assets, maintenance  # noqa: F401  registers tables on both bases
from .router.assets import (
    asset_history_router,
    assets_router,
    lifecycle_analysis_router,
    lifecycle_router,
    utilization_router,
)
from .router.common import export_router
from .router.maintenance import (
    calibration_router,
    complaints_router,
    pm_router,
    work_order_router,
)
from .router.overview import dashboard_router
from .router.procurement import contracts_router, vendors_router

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Create all tables
    AssetBase.metadata.create_all(bind=asset_engine)
    Base.metadata.create_all(bind=maintenance_engine)
    logger.info("BME service started")
    yield


app = FastAPI(title="BME Asset Management API", lifespan=lifespan)

origins = [origin.strip()
           for origin in settings.CORS_ORIGINS.split(",") if origin.strip()]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

setup_exception_handlers(app)

# Include routers
# lifecycle-analysis is registered ahead of the /{tag} routes
app.include_router(lifecycle_analysis_router.router)
app.include_router(assets_router.router)
app.include_router(lifecycle_router.router)
app.include_router(asset_history_router.router)
app.include_router(utilization_router.router)
app.include_router(contracts_router.router)
app.include_router(vendors_router.router)
app.include_router(complaints_router.router)
app.include_router(work_order_router.router)
app.include_router(pm_router.router)
app.include_router(calibration_router.router)
app.include_router(dashboard_router.router)
app.include_router(export_router.router)
