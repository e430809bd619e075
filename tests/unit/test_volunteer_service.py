import pytest
from sqlalchemy.exc import OperationalError

from nonprofitsuite.db import models
from nonprofitsuite.db.repositories import people as people_repo
from nonprofitsuite.db.repositories import volunteers as volunteers_repo
from nonprofitsuite.errors import ServiceError
from nonprofitsuite.services.volunteer_service import VolunteerService


@pytest.fixture
def volunteer(db, editor_ctx):
    person = people_repo.create_person(db, first_name="Grace")
    db.commit()
    return VolunteerService(db, editor_ctx).create_volunteer({"person_id": person.id, "skills": "Cooking"})


def test_new_volunteer_is_an_applicant(volunteer):
    assert volunteer.volunteer_status == "applicant"
    assert volunteer.application_status == "pending"
    assert volunteer.total_hours == 0.0


def test_create_requires_existing_person(db, editor_ctx):
    with pytest.raises(ServiceError) as exc:
        VolunteerService(db, editor_ctx).create_volunteer({"person_id": 404})
    assert exc.value.code == "invalid_person_id"


def test_activation_approves_application(db, editor_ctx, volunteer):
    svc = VolunteerService(db, editor_ctx)
    updated = svc.update_volunteer_status(volunteer.id, "active")
    assert updated.volunteer_status == "active"
    assert updated.application_status == "approved"
    assert svc.get_volunteers().pagination.total == 1

    with pytest.raises(ServiceError) as exc:
        svc.update_volunteer_status(volunteer.id, "retired")
    assert exc.value.code == "invalid_status"


def test_only_approved_hours_count_toward_total(db, editor_ctx, admin_ctx, volunteer):
    svc = VolunteerService(db, editor_ctx)
    first = svc.log_hours(volunteer.id, {"hours": 3.5, "activity_date": "2026-04-01", "description": "Food bank"})
    svc.log_hours(volunteer.id, {"hours": 2, "activity_date": "2026-04-02", "description": "Phone bank"})
    assert db.get(models.Volunteer, volunteer.id).total_hours == 0.0

    approved = VolunteerService(db, admin_ctx).approve_hours(first.id)
    assert approved.approved is True
    assert approved.approved_by == admin_ctx["id"]
    assert db.get(models.Volunteer, volunteer.id).total_hours == pytest.approx(3.5)

    assert len(svc.get_volunteer_hours(volunteer.id)) == 2
    assert [h.id for h in svc.get_volunteer_hours(volunteer.id, approved_only=True)] == [first.id]


@pytest.mark.parametrize(
    "payload, code",
    [
        ({"hours": 0, "activity_date": "2026-04-01", "description": "x"}, "invalid_hours"),
        ({"hours": 1, "description": "x"}, "missing_required_field"),
        ({"hours": 1, "activity_date": "April", "description": "x"}, "invalid_date"),
        ({"hours": 1, "activity_date": "2026-04-01", "description": "  "}, "missing_required_field"),
    ],
)
def test_log_hours_validation(db, editor_ctx, volunteer, payload, code):
    with pytest.raises(ServiceError) as exc:
        VolunteerService(db, editor_ctx).log_hours(volunteer.id, payload)
    assert exc.value.code == code
    assert db.query(models.VolunteerHours).count() == 0


def test_log_hours_for_unknown_volunteer(db, editor_ctx):
    with pytest.raises(ServiceError) as exc:
        VolunteerService(db, editor_ctx).log_hours(77, {"hours": 1, "activity_date": "2026-04-01", "description": "x"})
    assert exc.value.code == "invalid_volunteer_id"


def test_statuses():
    assert set(VolunteerService.get_volunteer_statuses()) == {"applicant", "active", "inactive", "suspended"}


def test_failed_total_refresh_rolls_back_hours(db, editor_ctx, volunteer, monkeypatch):
    def _fail(*_args, **_kwargs):
        raise OperationalError("UPDATE volunteers", {}, Exception("disk I/O error"))

    monkeypatch.setattr(volunteers_repo, "recompute_total_hours", _fail)
    with pytest.raises(ServiceError) as exc:
        VolunteerService(db, editor_ctx).log_hours(
            volunteer.id, {"hours": 4, "activity_date": "2026-04-01", "description": "Food bank"}
        )
    assert exc.value.code == "db_error"
    assert db.query(models.VolunteerHours).count() == 0
    assert db.get(models.Volunteer, volunteer.id).total_hours == 0.0
