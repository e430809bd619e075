"""Generic insert/update helpers shared by the domain repositories."""
from typing import Any, Dict, Optional, Type, TypeVar

from sqlalchemy.orm import Session

from nonprofitsuite.db.models import Base

ModelT = TypeVar("ModelT", bound=Base)


def insert(db: Session, model: Type[ModelT], values: Dict[str, Any]) -> ModelT:
    obj = model(**values)
    db.add(obj)
    db.flush()
    return obj


def get_by_id(db: Session, model: Type[ModelT], obj_id: int) -> Optional[ModelT]:
    return db.get(model, obj_id)


def update_fields(db: Session, obj: ModelT, values: Dict[str, Any]) -> ModelT:
    for name, value in values.items():
        setattr(obj, name, value)
    db.flush()
    return obj
