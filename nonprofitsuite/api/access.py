"""
CPA and legal-counsel access API endpoints.
"""
from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from nonprofitsuite.api.deps import get_current_user_context
from nonprofitsuite.db import schemas
from nonprofitsuite.db.database import get_db
from nonprofitsuite.services.access_service import CpaAccessService, LegalAccessService

router = APIRouter(tags=["professional-access"])


@router.get("/cpa-access", response_model=schemas.Page)
def list_cpa_access(request: Request, db: Session = Depends(get_db), user_context=Depends(get_current_user_context)):
    _user, ctx = user_context
    return CpaAccessService(db, ctx).get_access_records(dict(request.query_params))


@router.post("/cpa-access", response_model=schemas.CpaAccessResponse, status_code=status.HTTP_201_CREATED)
def grant_cpa_access(
    payload: schemas.CpaAccessCreate,
    db: Session = Depends(get_db),
    user_context=Depends(get_current_user_context),
):
    _user, ctx = user_context
    return CpaAccessService(db, ctx).grant_access(payload.model_dump(exclude_unset=True))


@router.get("/cpa-access/users")
def cpa_users(db: Session = Depends(get_db), user_context=Depends(get_current_user_context)):
    _user, ctx = user_context
    return CpaAccessService(db, ctx).get_cpa_users()


@router.get("/cpa-access/dashboard")
def cpa_dashboard(db: Session = Depends(get_db), user_context=Depends(get_current_user_context)):
    user, ctx = user_context
    return CpaAccessService(db, ctx).get_dashboard_data(user.id)


@router.post("/cpa-access/{grant_id}/revoke", response_model=schemas.CpaAccessResponse)
def revoke_cpa_access(grant_id: int, db: Session = Depends(get_db), user_context=Depends(get_current_user_context)):
    _user, ctx = user_context
    return CpaAccessService(db, ctx).revoke_access(grant_id)


@router.get("/legal-access", response_model=schemas.Page)
def list_legal_access(request: Request, db: Session = Depends(get_db), user_context=Depends(get_current_user_context)):
    _user, ctx = user_context
    return LegalAccessService(db, ctx).get_access_records(dict(request.query_params))


@router.post("/legal-access", response_model=schemas.LegalAccessResponse, status_code=status.HTTP_201_CREATED)
def grant_legal_access(
    payload: schemas.LegalAccessCreate,
    db: Session = Depends(get_db),
    user_context=Depends(get_current_user_context),
):
    _user, ctx = user_context
    return LegalAccessService(db, ctx).grant_access(payload.model_dump(exclude_unset=True))


@router.get("/legal-access/attorneys")
def attorneys(db: Session = Depends(get_db), user_context=Depends(get_current_user_context)):
    _user, ctx = user_context
    return LegalAccessService(db, ctx).get_attorneys()


@router.post("/legal-access/{grant_id}/revoke", response_model=schemas.LegalAccessResponse)
def revoke_legal_access(grant_id: int, db: Session = Depends(get_db), user_context=Depends(get_current_user_context)):
    _user, ctx = user_context
    return LegalAccessService(db, ctx).revoke_access(grant_id)
