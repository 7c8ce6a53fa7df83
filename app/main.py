import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.core.config import settings
from app.core.database import create_tables
from app.api.v1.shifts import router as shifts_router
from app.api.v1.compliance import router as compliance_router
from app.api.v1.absences import router as absences_router
from app.api.v1.leave import router as leave_router

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Create tables on startup (SQLite / local development)
    await create_tables()
    yield


app = FastAPI(
    title="CarePay API",
    description="Planning, conformité IDCC 3239 et calcul de la paie des auxiliaires de vie",
    version="1.0.0",
    lifespan=lifespan,
    # Swagger UI only in development; set DEBUG=false in production
    docs_url="/docs" if settings.DEBUG else None,
    redoc_url="/redoc" if settings.DEBUG else None,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

API_PREFIX = "/api/v1"

app.include_router(shifts_router, prefix=API_PREFIX)
app.include_router(compliance_router, prefix=API_PREFIX)
app.include_router(absences_router, prefix=API_PREFIX)
app.include_router(leave_router, prefix=API_PREFIX)


@app.get("/health")
async def health_check():
    return {"status": "ok", "service": "CarePay API", "version": "1.0.0"}
