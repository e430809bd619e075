import pytest

from nonprofitsuite.db.repositories import people as people_repo
from nonprofitsuite.errors import ServiceError
from nonprofitsuite.services.advocacy_service import CSV_HEADER, AdvocacyService


@pytest.fixture
def campaign(db, editor_ctx):
    svc = AdvocacyService(db, editor_ctx)
    issue = svc.create_issue({"title": "Clean water bill", "issue_type": "legislation"})
    return svc.create_campaign(issue.id, {"campaign_name": "Call your rep", "campaign_type": "phone",
                                          "goal_count": 3, "start_date": "2026-01-01"})


def test_issue_defaults_and_validation(db, editor_ctx, subscriber_ctx):
    svc = AdvocacyService(db, editor_ctx)
    issue = svc.create_issue({"title": "Zoning", "issue_type": "local"})
    assert issue.status == "monitoring"
    assert issue.priority == "medium"

    with pytest.raises(ServiceError) as exc:
        svc.create_issue({"title": "Zoning"})
    assert exc.value.code == "missing_required"
    with pytest.raises(ServiceError) as exc:
        svc.update_status(issue.id, "won")
    assert exc.value.code == "invalid_status"
    with pytest.raises(ServiceError) as exc:
        AdvocacyService(db, subscriber_ctx).create_issue({"title": "x", "issue_type": "y"})
    assert exc.value.code == "permission_denied"

    assert svc.update_status(issue.id, "active_campaign").status == "active_campaign"
    assert [i.id for i in svc.get_active_issues().items] == [issue.id]


def test_campaign_carries_issue_title(campaign):
    assert campaign.issue_title == "Clean water bill"
    assert campaign.status == "planning"
    assert campaign.action_count == 0


def test_logging_actions_moves_progress(db, editor_ctx, campaign):
    svc = AdvocacyService(db, editor_ctx)
    assert svc.calculate_progress(campaign.id) == 0

    svc.log_action(campaign.id, {"action_type": "call"})
    assert svc.calculate_progress(campaign.id) == 33
    svc.log_action(campaign.id, {"action_type": "call"})
    assert svc.calculate_progress(campaign.id) == 67
    svc.log_action(campaign.id, {"action_type": "email"})
    svc.log_action(campaign.id, {"action_type": "email"})
    assert svc.calculate_progress(campaign.id) == 100

    report = svc.get_campaign_report(campaign.id)
    assert report["total_actions"] == 4
    assert report["action_breakdown"] == {"call": 2, "email": 2}
    assert svc.get_advocacy_dashboard()["total_actions"] == 4


def test_progress_without_goal_is_zero(db, editor_ctx, campaign):
    svc = AdvocacyService(db, editor_ctx)
    open_ended = svc.create_campaign(campaign.issue_id, {"campaign_name": "Petition", "campaign_type": "petition"})
    svc.log_action(open_ended.id, {"action_type": "signature"})
    assert svc.calculate_progress(open_ended.id) == 0
    assert svc.calculate_progress(9999) == 0


def test_log_action_validation(db, editor_ctx, campaign):
    svc = AdvocacyService(db, editor_ctx)
    with pytest.raises(ServiceError) as exc:
        svc.log_action(campaign.id, {})
    assert exc.value.code == "missing_required"
    with pytest.raises(ServiceError) as exc:
        svc.log_action(9999, {"action_type": "call"})
    assert exc.value.code == "not_found"


def test_export_action_list(db, editor_ctx, campaign):
    person = people_repo.create_person(db, first_name="Ada", last_name="Lovelace", email="ada@example.org")
    db.commit()
    svc = AdvocacyService(db, editor_ctx)
    svc.log_action(campaign.id, {"action_type": "call", "person_id": person.id, "target_name": "Sen. Smith",
                                 "outcome": "voicemail", "action_date": "2026-02-01 10:30:00"})
    svc.log_action(campaign.id, {"action_type": "email", "action_date": "2026-01-15 09:00:00"})

    lines = svc.export_action_list(campaign.id).splitlines()
    assert lines[0] == ",".join(CSV_HEADER)
    assert lines[1] == "2026-02-01 10:30:00,Ada Lovelace,ada@example.org,call,Sen. Smith,voicemail"
    assert lines[2] == "2026-01-15 09:00:00,,,email,,"

    history = svc.get_person_actions(person.id)
    assert [a.campaign_name for a in history] == ["Call your rep"]


def test_issue_timeline(db, editor_ctx, campaign):
    svc = AdvocacyService(db, editor_ctx)
    svc.update_campaign(campaign.id, {"end_date": "2026-03-01", "status": "completed"})
    timeline = svc.get_issue_timeline(campaign.issue_id)
    assert [e["type"] for e in timeline] == ["campaign_end", "campaign_start"]
    assert timeline[0]["title"] == "Ended: Call your rep"
