"""Name/value option storage."""
from typing import Any

from sqlalchemy.orm import Session

from nonprofitsuite.db import models


def get_option(db: Session, name: str, default: Any = None) -> Any:
    row = db.get(models.Option, name)
    if row is None or row.value is None:
        return default
    return row.value


def update_option(db: Session, name: str, value: Any) -> models.Option:
    row = db.get(models.Option, name)
    if row is None:
        row = models.Option(name=name, value=value)
        db.add(row)
    else:
        row.value = value
    db.flush()
    return row


def delete_option(db: Session, name: str) -> bool:
    row = db.get(models.Option, name)
    if row is None:
        return False
    db.delete(row)
    db.flush()
    return True
