"""
Anonymous reporting API endpoints.

Submitting a report and checking its status are open to anonymous callers.
"""
from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from nonprofitsuite.api.deps import get_current_user_context
from nonprofitsuite.db import schemas
from nonprofitsuite.db.database import get_db
from nonprofitsuite.services.report_service import ReportService

router = APIRouter(prefix="/anonymous-reports", tags=["anonymous-reports"])


@router.post("/submit", status_code=status.HTTP_201_CREATED)
def submit_report(payload: schemas.ReportSubmit, db: Session = Depends(get_db)):
    return ReportService(db).submit_report(payload.model_dump(exclude_unset=True))


@router.get("/status/{report_number}", response_model=schemas.ReportStatus)
def check_status(report_number: str, db: Session = Depends(get_db)):
    return ReportService(db).check_status(report_number)


@router.get("", response_model=schemas.Page)
def list_reports(request: Request, db: Session = Depends(get_db), user_context=Depends(get_current_user_context)):
    _user, ctx = user_context
    return ReportService(db, ctx).get_reports(dict(request.query_params))


@router.get("/dashboard")
def dashboard(db: Session = Depends(get_db), user_context=Depends(get_current_user_context)):
    _user, ctx = user_context
    service = ReportService(db, ctx)
    return dict(service.get_dashboard_data(), categories=service.get_category_stats())


@router.get("/{report_id}", response_model=schemas.ReportResponse)
def get_report(report_id: int, db: Session = Depends(get_db), user_context=Depends(get_current_user_context)):
    _user, ctx = user_context
    return ReportService(db, ctx).get_report(report_id)


@router.patch("/{report_id}", response_model=schemas.ReportResponse)
def update_report(
    report_id: int,
    payload: schemas.ReportUpdate,
    db: Session = Depends(get_db),
    user_context=Depends(get_current_user_context),
):
    _user, ctx = user_context
    return ReportService(db, ctx).update_report(report_id, payload.model_dump(exclude_unset=True))
