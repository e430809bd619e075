"""
Shared plumbing for domain services.

Each service holds the request's ``Session`` and the resolved user context.
Writes run inside ``unit_of_work`` so that every statement of an operation is
committed or rolled back together, and the module's cache entries are dropped
only after a successful commit.
"""
import logging
from contextlib import contextmanager
from typing import Any, Callable, Dict, List, Optional, Type

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from nonprofitsuite.db import schemas
from nonprofitsuite.errors import ServiceError
from nonprofitsuite.utils import cache
from nonprofitsuite.utils.license import require_pro
from nonprofitsuite.utils.pagination import PaginationArgs, get_pagination_meta

logger = logging.getLogger(__name__)


class BaseService:
    """Base class holding the session, the user context and the cache module name."""

    module: str = ""

    def __init__(self, db: Session, current_user: Optional[Dict[str, Any]] = None):
        self.db = db
        self.current_user = current_user or {}

    @property
    def user_id(self) -> Optional[int]:
        return self.current_user.get("id")

    @contextmanager
    def unit_of_work(self, action: str, invalidate: Optional[List[str]] = None):
        """Commit on success; roll back and raise ``db_error`` on persistence failure."""
        try:
            yield
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            logger.error("db_error: module=%s action=%s", self.module, action, exc_info=True)
            raise ServiceError("db_error", f"Failed to {action}.")
        except ServiceError:
            self.db.rollback()
            raise
        for module in invalidate if invalidate is not None else [self.module]:
            cache.invalidate_module(module)

    def require_pro(self, label: str) -> None:
        require_pro(self.db, label)

    def remember(self, key: str, producer: Callable[[], Any], ttl: int = cache.DEFAULT_TTL,
                 store: str = cache.STORE_OBJECT) -> Any:
        return cache.remember(key, producer, ttl=ttl, store=store)

    @staticmethod
    def to_page(rows, total: int, args: PaginationArgs, schema: Type) -> schemas.Page:
        return schemas.Page(
            items=[schema.model_validate(r) for r in rows],
            pagination=schemas.PaginationMeta(**get_pagination_meta(total, args)),
        )

    @staticmethod
    def not_found(label: str) -> ServiceError:
        return ServiceError("not_found", f"{label} not found.")
