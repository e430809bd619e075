"""
Mobile REST surface (``/api/v1``), authenticated by API token.

Every call is written to the API request log with its status and timing.
"""
import logging
import time
from typing import Any, Callable

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from nonprofitsuite.api.deps import get_token_user_context
from nonprofitsuite.db.database import get_db
from nonprofitsuite.errors import ServiceError
from nonprofitsuite.services.meeting_service import MeetingService, TaskService
from nonprofitsuite.services.token_service import TokenService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["mobile"])

MOBILE_MEETING_LIMIT = 10


def _logged(request: Request, db: Session, ctx, handler: Callable[[], Any]) -> Any:
    started = time.perf_counter()
    code = 200
    try:
        return handler()
    except ServiceError as exc:
        code = exc.status_code
        raise
    except Exception:
        code = 500
        raise
    finally:
        TokenService(db, ctx).log_request(
            ctx["api_token"]["id"],
            endpoint=request.url.path,
            method=request.method,
            response_code=code,
            response_time=time.perf_counter() - started,
            ip_address=request.client.host if request.client else None,
            user_agent=request.headers.get("user-agent"),
        )


@router.post("/auth")
def authenticate(request: Request, db: Session = Depends(get_db), token_context=Depends(get_token_user_context)):
    user, ctx = token_context
    return _logged(request, db, ctx, lambda: {"authenticated": True, "user_id": user.id})


@router.get("/meetings")
def meetings(request: Request, db: Session = Depends(get_db), token_context=Depends(get_token_user_context)):
    _user, ctx = token_context
    return _logged(
        request, db, ctx, lambda: MeetingService(db, ctx).get_upcoming_meetings(MOBILE_MEETING_LIMIT)
    )


@router.get("/tasks")
def tasks(request: Request, db: Session = Depends(get_db), token_context=Depends(get_token_user_context)):
    user, ctx = token_context
    return _logged(request, db, ctx, lambda: TaskService(db, ctx).get_user_tasks(user.id))
