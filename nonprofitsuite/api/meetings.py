"""
Meeting and task API endpoints.
"""
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from nonprofitsuite.api.deps import get_current_user_context
from nonprofitsuite.db import schemas
from nonprofitsuite.db.database import get_db
from nonprofitsuite.services.meeting_service import MeetingService, TaskService

router = APIRouter(tags=["meetings"])


@router.get("/meetings/upcoming", response_model=list[schemas.MeetingResponse])
def upcoming_meetings(limit: int = 5, db: Session = Depends(get_db), user_context=Depends(get_current_user_context)):
    _user, ctx = user_context
    return MeetingService(db, ctx).get_upcoming_meetings(limit)


@router.post("/meetings", response_model=schemas.MeetingResponse, status_code=status.HTTP_201_CREATED)
def create_meeting(
    payload: schemas.MeetingCreate,
    db: Session = Depends(get_db),
    user_context=Depends(get_current_user_context),
):
    _user, ctx = user_context
    return MeetingService(db, ctx).create_meeting(payload.model_dump(exclude_unset=True))


@router.post("/tasks", response_model=schemas.TaskResponse, status_code=status.HTTP_201_CREATED)
def create_task(
    payload: schemas.TaskCreate,
    db: Session = Depends(get_db),
    user_context=Depends(get_current_user_context),
):
    _user, ctx = user_context
    return TaskService(db, ctx).create_task(payload.model_dump(exclude_unset=True))


@router.get("/tasks/mine", response_model=list[schemas.TaskResponse])
def my_tasks(db: Session = Depends(get_db), user_context=Depends(get_current_user_context)):
    _user, ctx = user_context
    return TaskService(db, ctx).get_user_tasks()


@router.put("/tasks/{task_id}/status", response_model=schemas.TaskResponse)
def update_task_status(
    task_id: int,
    payload: schemas.TaskStatusUpdate,
    db: Session = Depends(get_db),
    user_context=Depends(get_current_user_context),
):
    _user, ctx = user_context
    return TaskService(db, ctx).update_task_status(task_id, payload.status)
