import pytest
from sqlalchemy.exc import OperationalError

from nonprofitsuite.db import models
from nonprofitsuite.db.repositories import donors as donors_repo
from nonprofitsuite.db.repositories import people as people_repo
from nonprofitsuite.errors import ServiceError
from nonprofitsuite.services.donor_service import DonorService


@pytest.fixture
def person(db):
    p = people_repo.create_person(db, first_name="Ada", last_name="Lovelace", email="ada@example.org")
    db.commit()
    return p


@pytest.fixture
def donor(db, editor_ctx, person):
    return DonorService(db, editor_ctx).create_donor({"person_id": person.id})


def test_create_donor_defaults(donor, person):
    assert donor.person_id == person.id
    assert donor.donor_type == "individual"
    assert donor.donor_status == "active"
    assert donor.total_donated == 0.0


def test_create_donor_requires_person_or_org(db, editor_ctx):
    with pytest.raises(ServiceError) as exc:
        DonorService(db, editor_ctx).create_donor({})
    assert exc.value.code == "missing_required_field"


def test_create_donor_rejects_unknown_type(db, editor_ctx, person):
    with pytest.raises(ServiceError) as exc:
        DonorService(db, editor_ctx).create_donor({"person_id": person.id, "donor_type": "alien"})
    assert exc.value.code == "invalid_donor_type"


def test_create_donor_denied_for_subscriber(db, subscriber_ctx, person):
    with pytest.raises(ServiceError) as exc:
        DonorService(db, subscriber_ctx).create_donor({"person_id": person.id})
    assert exc.value.code == "permission_denied"


def test_create_donor_requires_pro(db, editor_ctx, person, free_tier):
    with pytest.raises(ServiceError) as exc:
        DonorService(db, editor_ctx).create_donor({"person_id": person.id})
    assert exc.value.code == "pro_required"


def test_record_donation_updates_totals(db, editor_ctx, donor):
    svc = DonorService(db, editor_ctx)
    svc.record_donation(donor.id, {"amount": 100, "donation_date": "2026-02-01"})
    svc.record_donation(donor.id, {"amount": "50.50", "donation_date": "2026-01-15"})

    refreshed = svc.get_donor(donor.id)
    assert refreshed.total_donated == pytest.approx(150.5)
    assert str(refreshed.first_donation_date) == "2026-01-15"
    assert str(refreshed.last_donation_date) == "2026-02-01"

    history = svc.get_donation_history(donor.id)
    assert [d.amount for d in history] == [100.0, 50.5]


@pytest.mark.parametrize("amount", [0, -5, "abc", None])
def test_non_positive_donation_writes_nothing(db, editor_ctx, donor, amount):
    with pytest.raises(ServiceError) as exc:
        DonorService(db, editor_ctx).record_donation(donor.id, {"amount": amount, "donation_date": "2026-01-01"})
    assert exc.value.code == "invalid_amount"
    assert db.query(models.Donation).count() == 0


def test_donation_requires_valid_date(db, editor_ctx, donor):
    svc = DonorService(db, editor_ctx)
    with pytest.raises(ServiceError) as exc:
        svc.record_donation(donor.id, {"amount": 10})
    assert exc.value.code == "missing_required_field"
    with pytest.raises(ServiceError) as exc:
        svc.record_donation(donor.id, {"amount": 10, "donation_date": "yesterday"})
    assert exc.value.code == "invalid_date"


def test_donation_for_unknown_donor(db, editor_ctx):
    with pytest.raises(ServiceError) as exc:
        DonorService(db, editor_ctx).record_donation(999, {"amount": 10, "donation_date": "2026-01-01"})
    assert exc.value.code == "invalid_donor_id"


def test_failed_total_refresh_rolls_back_donation(db, editor_ctx, donor, monkeypatch):
    def _fail(*_args, **_kwargs):
        raise OperationalError("UPDATE donors", {}, Exception("disk I/O error"))

    monkeypatch.setattr(donors_repo, "recompute_donor_totals", _fail)
    with pytest.raises(ServiceError) as exc:
        DonorService(db, editor_ctx).record_donation(donor.id, {"amount": 25, "donation_date": "2026-01-01"})
    assert exc.value.code == "db_error"
    assert db.query(models.Donation).count() == 0
    assert db.get(models.Donor, donor.id).total_donated == 0.0


def test_list_is_cached_until_a_write(db, editor_ctx, person):
    svc = DonorService(db, editor_ctx)
    assert svc.get_donors().pagination.total == 0
    svc.create_donor({"person_id": person.id})
    page = svc.get_donors()
    assert page.pagination.total == 1
    assert page.items[0].person_id == person.id


def test_list_orders_by_total_desc_and_filters_status(db, editor_ctx, person):
    svc = DonorService(db, editor_ctx)
    small = svc.create_donor({"person_id": person.id})
    big = svc.create_donor({"organization_id": 42, "donor_type": "organization"})
    svc.record_donation(small.id, {"amount": 5, "donation_date": "2026-01-01"})
    svc.record_donation(big.id, {"amount": 500, "donation_date": "2026-01-01"})
    svc.update_donor(small.id, {"donor_status": "lapsed"})

    active = svc.get_donors()
    assert [d.id for d in active.items] == [big.id]

    everyone = svc.get_donors({"donor_status": "lapsed", "orderby": "bogus"})
    assert [d.id for d in everyone.items] == [small.id]


def test_update_donor_requires_fields(db, editor_ctx, donor):
    with pytest.raises(ServiceError) as exc:
        DonorService(db, editor_ctx).update_donor(donor.id, {"total_donated": 1e9})
    assert exc.value.code == "no_data"


def test_get_missing_donor(db, editor_ctx):
    with pytest.raises(ServiceError) as exc:
        DonorService(db, editor_ctx).get_donor(12345)
    assert exc.value.code == "not_found"


def test_donor_levels():
    assert DonorService.get_donor_levels()["gold"] == "Gold"
