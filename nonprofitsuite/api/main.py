"""
FastAPI app assembly: logging, error rendering and router wiring.
Also hosts the site-wide license and cache endpoints.
"""
import logging
import os

from fastapi import Body, Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

# Configure logging
LOG_LEVEL_NAME = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_LEVEL = getattr(logging, LOG_LEVEL_NAME, logging.INFO)
logging.basicConfig(level=LOG_LEVEL)
logger = logging.getLogger(__name__)
logger.setLevel(LOG_LEVEL)
logger.info("app_startup: log_level=%s", LOG_LEVEL_NAME)

from nonprofitsuite import __version__
from nonprofitsuite.api.access import router as access_router
from nonprofitsuite.api.advocacy import router as advocacy_router
from nonprofitsuite.api.assets import router as assets_router
from nonprofitsuite.api.assistant import router as assistant_router
from nonprofitsuite.api.calendar import router as calendar_router
from nonprofitsuite.api.compliance import router as compliance_router
from nonprofitsuite.api.deps import get_current_user_context
from nonprofitsuite.api.donors import router as donors_router
from nonprofitsuite.api.meetings import router as meetings_router
from nonprofitsuite.api.metrics import router as metrics_router
from nonprofitsuite.api.mobile import router as mobile_router
from nonprofitsuite.api.people import router as people_router
from nonprofitsuite.api.permissions import can_manage_nonprofitsuite, check_capability
from nonprofitsuite.api.reports import router as reports_router
from nonprofitsuite.api.tokens import router as tokens_router
from nonprofitsuite.api.treasury import router as treasury_router
from nonprofitsuite.api.volunteers import router as volunteers_router
from nonprofitsuite.db.database import get_db
from nonprofitsuite.errors import ServiceError
from nonprofitsuite.utils import cache, license as license_utils
from nonprofitsuite.utils.capabilities import CAP_MANAGE_OPTIONS

# Database schema is managed by Alembic migrations (SQLite is created on demand).

app = FastAPI(
    title="NonprofitSuite",
    description="Back-office records for nonprofits: donors, volunteers, treasury, compliance and more.",
    version=__version__,
)

app.router.redirect_slashes = False

app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in os.getenv("CORS_ORIGINS", "http://localhost:3000").split(",") if o.strip()],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("service_error: path=%s code=%s", request.url.path, exc.code)
    else:
        logger.info("service_error: path=%s code=%s status=%s", request.url.path, exc.code, exc.status_code)
    return JSONResponse(status_code=exc.status_code, content={"error": exc.to_dict()})


@app.get("/health")
def health_check():
    return {"status": "ok", "service": "nonprofitsuite", "version": __version__}


@app.get("/license")
def license_info(db: Session = Depends(get_db), user_context=Depends(get_current_user_context)):
    _user, ctx = user_context
    check_capability(ctx, CAP_MANAGE_OPTIONS, "view license settings")
    return license_utils.get_license_info(db)


@app.post("/license/activate")
def activate_license(
    license_key: str = Body(..., embed=True),
    db: Session = Depends(get_db),
    user_context=Depends(get_current_user_context),
):
    _user, ctx = user_context
    can_manage_nonprofitsuite(ctx)
    result = license_utils.activate_license(db, license_key.strip())
    if not result["success"]:
        raise ServiceError("invalid_license", result["message"])
    return result


@app.post("/license/deactivate")
def deactivate_license(db: Session = Depends(get_db), user_context=Depends(get_current_user_context)):
    _user, ctx = user_context
    can_manage_nonprofitsuite(ctx)
    return {"deactivated": license_utils.deactivate_license(db)}


@app.get("/cache/stats")
def cache_stats(user_context=Depends(get_current_user_context)):
    _user, ctx = user_context
    check_capability(ctx, CAP_MANAGE_OPTIONS, "view cache statistics")
    return cache.get_stats()


@app.post("/cache/clear")
def cache_clear(user_context=Depends(get_current_user_context)):
    _user, ctx = user_context
    can_manage_nonprofitsuite(ctx)
    return {"cleared": cache.clear_all()}


app.include_router(people_router)
app.include_router(donors_router)
app.include_router(volunteers_router)
app.include_router(treasury_router)
app.include_router(assets_router)
app.include_router(compliance_router)
app.include_router(calendar_router)
app.include_router(advocacy_router)
app.include_router(reports_router)
app.include_router(access_router)
app.include_router(meetings_router)
app.include_router(tokens_router)
app.include_router(mobile_router)
app.include_router(metrics_router)
app.include_router(assistant_router)
