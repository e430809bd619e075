"""
Public metrics API endpoints.
"""
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, Request
from fastapi.responses import HTMLResponse
from sqlalchemy.orm import Session

from nonprofitsuite.api.deps import get_current_user_context
from nonprofitsuite.db import schemas
from nonprofitsuite.db.database import get_db
from nonprofitsuite.errors import ServiceError
from nonprofitsuite.services.metrics_service import MetricsService

router = APIRouter(prefix="/metrics", tags=["public-metrics"])


def _service(db: Session, user_context) -> MetricsService:
    _user, ctx = user_context
    return MetricsService(db, ctx)


@router.get("", response_model=list[schemas.MetricsResponse])
def all_metrics(db: Session = Depends(get_db), user_context=Depends(get_current_user_context)):
    return _service(db, user_context).get_all_metrics()


@router.post("", response_model=schemas.MetricsResponse)
def save_metrics(
    payload: Dict[str, Any] = Body(...),
    db: Session = Depends(get_db),
    user_context=Depends(get_current_user_context),
):
    return _service(db, user_context).save_metrics(payload)


@router.get("/sharing", response_model=schemas.SharingPreference)
def get_sharing(db: Session = Depends(get_db), user_context=Depends(get_current_user_context)):
    return schemas.SharingPreference(enabled=_service(db, user_context).is_sharing_enabled())


@router.put("/sharing", response_model=schemas.SharingPreference)
def set_sharing(
    payload: schemas.SharingPreference,
    db: Session = Depends(get_db),
    user_context=Depends(get_current_user_context),
):
    return schemas.SharingPreference(enabled=_service(db, user_context).set_sharing_preference(payload.enabled))


@router.get("/benchmarks")
def benchmarks(request: Request, db: Session = Depends(get_db), user_context=Depends(get_current_user_context)):
    return _service(db, user_context).get_benchmarks(dict(request.query_params))


@router.get("/{year}/calculate", response_model=schemas.MetricsValues)
def calculate(year: int, db: Session = Depends(get_db), user_context=Depends(get_current_user_context)):
    return _service(db, user_context).calculate_annual_metrics(year)


@router.get("/{year}", response_model=Optional[schemas.MetricsResponse])
def get_metrics(year: int, db: Session = Depends(get_db), user_context=Depends(get_current_user_context)):
    metrics = _service(db, user_context).get_metrics(year)
    if metrics is None:
        raise ServiceError("no_metrics", "No metrics found for this year.")
    return metrics


@router.post("/{year}/submit")
def submit(year: int, db: Session = Depends(get_db), user_context=Depends(get_current_user_context)):
    return {"submitted": _service(db, user_context).submit_metrics(year)}


@router.get("/{year}/export")
def export(year: int, db: Session = Depends(get_db), user_context=Depends(get_current_user_context)):
    return _service(db, user_context).export_metrics(year)


@router.get("/{year}/widget")
def widget(year: int, db: Session = Depends(get_db), user_context=Depends(get_current_user_context)):
    return _service(db, user_context).get_widget_data(year)


@router.get("/{year}/embed", response_class=HTMLResponse)
def embed(year: int, db: Session = Depends(get_db), user_context=Depends(get_current_user_context)):
    return HTMLResponse(_service(db, user_context).generate_embed_code(year))
