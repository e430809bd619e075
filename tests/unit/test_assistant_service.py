import pytest

from nonprofitsuite.db import schemas
from nonprofitsuite.errors import ServiceError
from nonprofitsuite.services.assistant_service import (
    COMPLETION_STUB,
    SUPPORT_EMAIL,
    AssistantService,
    existing_features,
    is_bug_report,
    is_feature_request,
)


def test_triage_helpers():
    assert is_bug_report("The export is BROKEN")
    assert not is_bug_report("How do I add a donor?")
    assert is_feature_request("Is there a way to track raffles?")
    assert existing_features("raffle for our donor drive, donor list") == [
        "State Compliance Module (CA)",
        "Donor Management Module",
    ]
    assert existing_features("knitting") == []


def test_bug_reports_get_support_preamble(db, editor_ctx):
    reply = AssistantService(db, editor_ctx).query("I got an error saving a meeting")
    assert reply.startswith("It sounds like you've encountered an issue.")
    assert f"**{SUPPORT_EMAIL}**" in reply
    assert reply.endswith(COMPLETION_STUB)


def test_feature_requests_point_at_existing_modules(db, editor_ctx):
    svc = AssistantService(db, editor_ctx)
    reply = svc.query("Can you add depreciation tracking?")
    assert reply.startswith("Good news - check out: Assets Module\n\n")

    reply = svc.query("I wish it could knit scarves")
    assert reply.startswith("That feature isn't available yet.")
    assert svc.query("How do I invite a board member?") == COMPLETION_STUB


def test_query_requires_pro(db, editor_ctx, free_tier):
    with pytest.raises(ServiceError) as exc:
        AssistantService(db, editor_ctx).query("hello")
    assert exc.value.code == "pro_required"
    assert exc.value.message == "PRO license required for AI Assistant"


def test_ask_records_both_sides(db, editor_ctx):
    svc = AssistantService(db, editor_ctx)
    reply = svc.ask(schemas.AssistantQuery(message="Where are volunteer hours?"))
    messages = svc.get_messages(reply.conversation_id)
    assert [m.role for m in messages] == ["user", "assistant"]
    assert messages[1].message == reply.response

    svc.ask(schemas.AssistantQuery(message="Thanks", conversation_id=reply.conversation_id))
    assert len(svc.get_messages(reply.conversation_id)) == 4
    stats = svc.get_usage_stats(editor_ctx["id"])
    assert stats["conversation_count"] == 1
    assert stats["total_messages"] == 4


def test_conversations_are_private(db, editor_ctx, author_ctx, admin_ctx):
    reply = AssistantService(db, editor_ctx).ask(schemas.AssistantQuery(message="hello"))
    with pytest.raises(ServiceError) as exc:
        AssistantService(db, author_ctx).get_messages(reply.conversation_id)
    assert exc.value.code == "permission_denied"
    with pytest.raises(ServiceError) as exc:
        AssistantService(db, author_ctx).ask(schemas.AssistantQuery(message="hi", conversation_id=reply.conversation_id))
    assert exc.value.code == "permission_denied"
    assert len(AssistantService(db, admin_ctx).get_messages(reply.conversation_id)) == 2


def test_message_validation(db, editor_ctx):
    svc = AssistantService(db, editor_ctx)
    conversation = svc.start_conversation(editor_ctx["id"])
    with pytest.raises(ServiceError) as exc:
        svc.add_message(conversation.id, "system", "x")
    assert exc.value.code == "invalid_role"
    with pytest.raises(ServiceError) as exc:
        svc.add_message(9999, "user", "x")
    assert exc.value.code == "not_found"
