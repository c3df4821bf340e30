import logging
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager

from uam.config import get_settings
from uam.database import engine, Base
from uam.routers import (
    sections, locations, companies, users, roles, assets, asset_transfers,
    software_licenses, documents, uploads, reports, dashboard, stats
)

settings = get_settings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: create missing tables (migrations are run with alembic)
    Base.metadata.create_all(bind=engine)
    logger.info("UAM API started")
    yield


app = FastAPI(
    title="UAM - Asset Management",
    description="Internal asset management: assets, sections, licenses and movements",
    version="0.1.0",
    lifespan=lifespan,
    redirect_slashes=False,
)

# CORS for the frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.frontend_url],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routers
app.include_router(assets.router, prefix="/api/assets", tags=["Assets"])
app.include_router(asset_transfers.router, prefix="/api/asset-transfers", tags=["Movements"])
app.include_router(reports.router, prefix="/api/reports", tags=["Reports"])
app.include_router(sections.router, prefix="/api/sections", tags=["Sections"])
app.include_router(locations.router, prefix="/api/locations", tags=["Locations"])
app.include_router(companies.router, prefix="/api/companies", tags=["Companies"])
app.include_router(users.router, prefix="/api/users", tags=["Users"])
app.include_router(roles.router, prefix="/api/roles", tags=["Roles"])
app.include_router(software_licenses.router, prefix="/api/software-licenses", tags=["Software licenses"])
app.include_router(documents.router, prefix="/api/documents", tags=["Documents"])
app.include_router(uploads.router, prefix="/api/uploads", tags=["Documents"])
app.include_router(dashboard.router, prefix="/api/dashboard", tags=["Dashboard"])
app.include_router(stats.router, prefix="/api/stats", tags=["Dashboard"])


@app.get("/")
async def root():
    return {"message": "UAM API running", "version": "0.1.0"}


@app.get("/health")
async def health_check():
    return {"status": "healthy"}
