"""
Advocacy API endpoints: issues, campaigns and supporter actions.
"""
from fastapi import APIRouter, Body, Depends, Request, status
from fastapi.responses import Response
from sqlalchemy.orm import Session

from nonprofitsuite.api.deps import get_current_user_context
from nonprofitsuite.db import schemas
from nonprofitsuite.db.database import get_db
from nonprofitsuite.services.advocacy_service import AdvocacyService

router = APIRouter(prefix="/advocacy", tags=["advocacy"])


def _service(db: Session, user_context) -> AdvocacyService:
    _user, ctx = user_context
    return AdvocacyService(db, ctx)


@router.get("/dashboard")
def dashboard(db: Session = Depends(get_db), user_context=Depends(get_current_user_context)):
    return _service(db, user_context).get_advocacy_dashboard()


@router.get("/issues", response_model=schemas.Page)
def list_issues(request: Request, db: Session = Depends(get_db), user_context=Depends(get_current_user_context)):
    return _service(db, user_context).get_issues(dict(request.query_params))


@router.post("/issues", response_model=schemas.IssueResponse, status_code=status.HTTP_201_CREATED)
def create_issue(
    payload: schemas.IssueCreate,
    db: Session = Depends(get_db),
    user_context=Depends(get_current_user_context),
):
    return _service(db, user_context).create_issue(payload.model_dump(exclude_unset=True))


@router.get("/issues/active", response_model=schemas.Page)
def active_issues(db: Session = Depends(get_db), user_context=Depends(get_current_user_context)):
    return _service(db, user_context).get_active_issues()


@router.get("/issues/upcoming-decisions", response_model=list[schemas.IssueResponse])
def upcoming_decisions(
    days_ahead: int = 30,
    db: Session = Depends(get_db),
    user_context=Depends(get_current_user_context),
):
    return _service(db, user_context).get_issues_by_decision_date(days_ahead)


@router.patch("/issues/{issue_id}", response_model=schemas.IssueResponse)
def update_issue(
    issue_id: int,
    payload: schemas.IssueCreate,
    db: Session = Depends(get_db),
    user_context=Depends(get_current_user_context),
):
    return _service(db, user_context).update_issue(issue_id, payload.model_dump(exclude_unset=True))


@router.put("/issues/{issue_id}/status", response_model=schemas.IssueResponse)
def update_issue_status(
    issue_id: int,
    new_status: str = Body(..., embed=True, alias="status"),
    db: Session = Depends(get_db),
    user_context=Depends(get_current_user_context),
):
    return _service(db, user_context).update_status(issue_id, new_status)


@router.get("/issues/{issue_id}/timeline")
def issue_timeline(issue_id: int, db: Session = Depends(get_db), user_context=Depends(get_current_user_context)):
    return _service(db, user_context).get_issue_timeline(issue_id)


@router.post("/issues/{issue_id}/campaigns", response_model=schemas.CampaignResponse,
             status_code=status.HTTP_201_CREATED)
def create_campaign(
    issue_id: int,
    payload: schemas.CampaignCreate,
    db: Session = Depends(get_db),
    user_context=Depends(get_current_user_context),
):
    return _service(db, user_context).create_campaign(issue_id, payload.model_dump(exclude_unset=True))


@router.get("/campaigns", response_model=list[schemas.CampaignResponse])
def list_campaigns(request: Request, db: Session = Depends(get_db), user_context=Depends(get_current_user_context)):
    return _service(db, user_context).get_campaigns(dict(request.query_params))


@router.get("/campaigns/active", response_model=list[schemas.CampaignResponse])
def active_campaigns(db: Session = Depends(get_db), user_context=Depends(get_current_user_context)):
    return _service(db, user_context).get_active_campaigns()


@router.get("/campaigns/{campaign_id}", response_model=schemas.CampaignResponse)
def get_campaign(campaign_id: int, db: Session = Depends(get_db), user_context=Depends(get_current_user_context)):
    return _service(db, user_context).get_campaign(campaign_id)


@router.patch("/campaigns/{campaign_id}", response_model=schemas.CampaignResponse)
def update_campaign(
    campaign_id: int,
    payload: schemas.CampaignCreate,
    db: Session = Depends(get_db),
    user_context=Depends(get_current_user_context),
):
    return _service(db, user_context).update_campaign(campaign_id, payload.model_dump(exclude_unset=True))


@router.get("/campaigns/{campaign_id}/progress")
def campaign_progress(campaign_id: int, db: Session = Depends(get_db), user_context=Depends(get_current_user_context)):
    return {"campaign_id": campaign_id, "progress": _service(db, user_context).calculate_progress(campaign_id)}


@router.get("/campaigns/{campaign_id}/report")
def campaign_report(campaign_id: int, db: Session = Depends(get_db), user_context=Depends(get_current_user_context)):
    return _service(db, user_context).get_campaign_report(campaign_id)


@router.post("/campaigns/{campaign_id}/actions", response_model=schemas.ActionResponse,
             status_code=status.HTTP_201_CREATED)
def log_action(
    campaign_id: int,
    payload: schemas.ActionCreate,
    db: Session = Depends(get_db),
    user_context=Depends(get_current_user_context),
):
    return _service(db, user_context).log_action(campaign_id, payload.model_dump(exclude_unset=True))


@router.get("/campaigns/{campaign_id}/actions", response_model=list[schemas.ActionResponse])
def list_actions(campaign_id: int, db: Session = Depends(get_db), user_context=Depends(get_current_user_context)):
    return _service(db, user_context).get_actions(campaign_id)


@router.get("/campaigns/{campaign_id}/actions/summary")
def action_summary(campaign_id: int, db: Session = Depends(get_db), user_context=Depends(get_current_user_context)):
    return _service(db, user_context).get_action_summary(campaign_id)


@router.get("/campaigns/{campaign_id}/actions/export.csv")
def export_actions(campaign_id: int, db: Session = Depends(get_db), user_context=Depends(get_current_user_context)):
    return Response(
        content=_service(db, user_context).export_action_list(campaign_id),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="campaign-{campaign_id}-actions.csv"'},
    )


@router.get("/people/{person_id}/actions", response_model=list[schemas.ActionResponse])
def person_actions(person_id: int, db: Session = Depends(get_db), user_context=Depends(get_current_user_context)):
    return _service(db, user_context).get_person_actions(person_id)
