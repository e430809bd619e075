from typing import Optional

from sqlalchemy.orm import Session

from nonprofitsuite.db import models


def get_user(db: Session, user_id: int) -> Optional[models.User]:
    return db.get(models.User, user_id)


def get_user_by_email(db: Session, email: str) -> Optional[models.User]:
    return db.query(models.User).filter(models.User.email == email).first()


def create_user(db: Session, *, email: str, display_name: Optional[str], role: str) -> models.User:
    user = models.User(email=email, display_name=display_name, role=role)
    db.add(user)
    db.flush()
    return user
