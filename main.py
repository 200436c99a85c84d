import logging

from fastapi import FastAPI
from starlette.middleware.cors import CORSMiddleware
from core.config_loader import settings

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

from shift.router import shift_router, schedule_router
from location.router import location_router
from employee.router import employee_router
from jobrole.router import jobrole_router
from organization.router import organization_router, company_router
from report.router import report_router
import models_bootstrap

openapi_tags = [
    {
        "name": "Schedule",
        "description": "Weekly shift grid of one location",
    },
    {
        "name": "Health Checks",
        "description": "Application health checks",
    }
]

app = FastAPI(title="Shiftboard", openapi_tags=openapi_tags)

if settings.cors_origins:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[origin.strip("/") for origin in settings.cors_origins],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

app.include_router(schedule_router, prefix="/api")
app.include_router(shift_router, prefix="/api")
app.include_router(location_router, prefix="/api")
app.include_router(employee_router, prefix="/api")
app.include_router(jobrole_router, prefix="/api")
app.include_router(organization_router, prefix="/api")
app.include_router(company_router, prefix="/api")
app.include_router(report_router, prefix="/api")

logger.info("Shiftboard API ready")


@app.get("/health", tags=['Health Checks'])
def read_root():
    return {"health": "true"}
