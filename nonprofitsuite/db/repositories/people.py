from typing import Optional

from sqlalchemy.orm import Session

from nonprofitsuite.db import models


def create_person(db: Session, *, first_name: str, last_name: Optional[str] = None,
                  email: Optional[str] = None, phone: Optional[str] = None) -> models.Person:
    person = models.Person(first_name=first_name, last_name=last_name, email=email, phone=phone)
    db.add(person)
    db.flush()
    return person


def get_person(db: Session, person_id: int) -> Optional[models.Person]:
    return db.get(models.Person, person_id)
