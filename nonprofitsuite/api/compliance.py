"""
State compliance and compliance-calendar API endpoints.
"""
from typing import Optional

from fastapi import APIRouter, Body, Depends, Query, Request, status
from sqlalchemy.orm import Session

from nonprofitsuite.api.deps import get_current_user_context
from nonprofitsuite.db import schemas
from nonprofitsuite.db.database import get_db
from nonprofitsuite.errors import ServiceError
from nonprofitsuite.services.compliance_service import ComplianceService
from nonprofitsuite.services.state_compliance_service import StateComplianceService

router = APIRouter(tags=["compliance"])


def _states(db: Session, user_context) -> StateComplianceService:
    _user, ctx = user_context
    return StateComplianceService(db, ctx)


def _items(db: Session, user_context) -> ComplianceService:
    _user, ctx = user_context
    return ComplianceService(db, ctx)


@router.get("/state-compliance/states")
def available_states():
    return StateComplianceService.get_available_states()


@router.get("/state-compliance/states/{state_code}")
def state_data(state_code: str):
    data = StateComplianceService.load_state_data(state_code)
    if data is None:
        raise ServiceError("not_found", "No compliance data for that state.")
    return data


@router.get("/state-compliance/operations", response_model=list[schemas.StateOperationResponse])
def list_operations(
    status_filter: Optional[str] = Query(default=None, alias="status"),
    db: Session = Depends(get_db),
    user_context=Depends(get_current_user_context),
):
    return _states(db, user_context).get_state_operations(status_filter)


@router.post("/state-compliance/operations", response_model=schemas.StateOperationResponse,
             status_code=status.HTTP_201_CREATED)
def add_operation(
    payload: schemas.StateOperationCreate,
    db: Session = Depends(get_db),
    user_context=Depends(get_current_user_context),
):
    return _states(db, user_context).add_state_operation(payload.model_dump(exclude_unset=True))


@router.patch("/state-compliance/operations/{op_id}", response_model=schemas.StateOperationResponse)
def update_operation(
    op_id: int,
    payload: schemas.StateOperationUpdate,
    db: Session = Depends(get_db),
    user_context=Depends(get_current_user_context),
):
    return _states(db, user_context).update_state_operation(op_id, payload.model_dump(exclude_unset=True))


@router.get("/state-compliance/operations/{op_id}/requirements", response_model=list[schemas.RequirementResponse])
def list_requirements(op_id: int, db: Session = Depends(get_db), user_context=Depends(get_current_user_context)):
    return _states(db, user_context).get_requirements(op_id)


@router.patch("/state-compliance/requirements/{req_id}", response_model=schemas.RequirementResponse)
def update_requirement(
    req_id: int,
    payload: schemas.RequirementUpdate,
    db: Session = Depends(get_db),
    user_context=Depends(get_current_user_context),
):
    return _states(db, user_context).update_requirement(req_id, payload.model_dump(exclude_unset=True))


@router.get("/state-compliance/requirements/pending", response_model=list[schemas.RequirementResponse])
def pending_requirements(db: Session = Depends(get_db), user_context=Depends(get_current_user_context)):
    return _states(db, user_context).get_pending_requirements()


@router.get("/state-compliance/requirements/overdue", response_model=list[schemas.RequirementResponse])
def overdue_requirements(db: Session = Depends(get_db), user_context=Depends(get_current_user_context)):
    return _states(db, user_context).get_overdue_requirements()


@router.get("/state-compliance/requirements/by-type/{requirement_type}",
            response_model=list[schemas.RequirementResponse])
def requirements_by_type(
    requirement_type: str,
    db: Session = Depends(get_db),
    user_context=Depends(get_current_user_context),
):
    return _states(db, user_context).get_requirements_by_type(requirement_type)


@router.get("/state-compliance/dashboard")
def state_dashboard(db: Session = Depends(get_db), user_context=Depends(get_current_user_context)):
    service = _states(db, user_context)
    return dict(service.get_dashboard_data(), compliance_rate=service.calculate_compliance_rate())


@router.get("/compliance/types")
def compliance_types():
    return {"types": ComplianceService.get_compliance_types(), "recurrence": ComplianceService.get_recurrence_options()}


@router.get("/compliance/items", response_model=schemas.Page)
def list_items(request: Request, db: Session = Depends(get_db), user_context=Depends(get_current_user_context)):
    return _items(db, user_context).get_items(dict(request.query_params))


@router.post("/compliance/items", response_model=schemas.ComplianceItemResponse, status_code=status.HTTP_201_CREATED)
def create_item(
    payload: schemas.ComplianceItemCreate,
    db: Session = Depends(get_db),
    user_context=Depends(get_current_user_context),
):
    return _items(db, user_context).create_item(payload.model_dump(exclude_unset=True))


@router.post("/compliance/items/{item_id}/complete", response_model=schemas.ComplianceItemResponse)
def complete_item(
    item_id: int,
    completion_date: Optional[str] = Body(default=None, embed=True),
    db: Session = Depends(get_db),
    user_context=Depends(get_current_user_context),
):
    return _items(db, user_context).mark_completed(item_id, completion_date)


@router.get("/compliance/upcoming", response_model=list[schemas.ComplianceItemResponse])
def upcoming_items(days: int = 30, db: Session = Depends(get_db), user_context=Depends(get_current_user_context)):
    return _items(db, user_context).get_upcoming(days)


@router.get("/compliance/overdue", response_model=list[schemas.ComplianceItemResponse])
def overdue_items(db: Session = Depends(get_db), user_context=Depends(get_current_user_context)):
    return _items(db, user_context).get_overdue()
