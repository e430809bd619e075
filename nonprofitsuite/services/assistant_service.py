"""
In-app help assistant.

Conversations and messages are stored per user. Replies are triaged first:
bug reports get the support preamble, feature requests are matched against
the keyword map of existing modules, and everything else goes to the
completion backend, which is a fixed stub until a provider is wired in.
"""
import logging
import os
from typing import Any, Dict, List, Optional

from nonprofitsuite.api.permissions import has_capability
from nonprofitsuite.db import models, schemas
from nonprofitsuite.db.repositories import assistant as assistant_repo
from nonprofitsuite.errors import ServiceError
from nonprofitsuite.services.base import BaseService
from nonprofitsuite.utils import cache
from nonprofitsuite.utils.capabilities import CAP_MANAGE_OPTIONS
from nonprofitsuite.utils.license import is_pro_active
from nonprofitsuite.utils.sanitize import absint, kses_post, sanitize_text_field

logger = logging.getLogger(__name__)

SUPPORT_EMAIL = "support@silverhost.net"
MESSAGE_ROLES = ("user", "assistant")

BUG_KEYWORDS = (
    "error",
    "bug",
    "broken",
    "not working",
    "crash",
    "problem",
    "issue",
    "wrong",
    "failed",
)
FEATURE_KEYWORDS = (
    "can you add",
    "feature request",
    "i wish",
    "does this support",
    "is there a way",
)
# keyword -> module that already covers it
FEATURE_MAP = {
    "raffle": "State Compliance Module (CA)",
    "multi-state": "State Compliance Module",
    "filing": "State Compliance Module",
    "registration": "State Compliance Module",
    "audit": "Compliance Module",
    "insurance": "Compliance Module",
    "policy": "Compliance Module",
    "cpa": "CPA Dashboard",
    "attorney": "Legal Counsel Dashboard",
    "meeting": "Board Meetings Module",
    "calendar": "Calendar Module",
    "donor": "Donor Management Module",
    "volunteer": "Volunteer Management Module",
    "treasury": "Treasury Module",
    "financial report": "Treasury Module",
    "in-kind": "In-Kind Donations Module",
    "asset": "Assets Module",
    "depreciation": "Assets Module",
    "advocacy": "Advocacy Module",
    "whistleblower": "Anonymous Reporting Module",
    "mobile": "Mobile API",
    "transparency": "Public Metrics Module",
}

COMPLETION_STUB = (
    "[AI Assistant API integration pending. This would process your query with "
    "full context and provide intelligent responses.]"
)


def is_api_configured() -> bool:
    return bool(os.getenv("NONPROFITSUITE_AI_API_KEY", "").strip())


def _contains_any(text: str, keywords) -> bool:
    lowered = text.lower()
    return any(keyword in lowered for keyword in keywords)


def is_bug_report(text: str) -> bool:
    return _contains_any(text, BUG_KEYWORDS)


def is_feature_request(text: str) -> bool:
    return _contains_any(text, FEATURE_KEYWORDS)


def existing_features(text: str) -> List[str]:
    """Modules whose keywords appear in ``text``, in map order without repeats."""
    lowered = text.lower()
    found: List[str] = []
    for keyword, module in FEATURE_MAP.items():
        if keyword in lowered and module not in found:
            found.append(module)
    return found


def _complete(message: str, history: List[Dict[str, str]]) -> str:
    logger.debug("assistant_completion_stub: history=%d configured=%s", len(history), is_api_configured())
    return COMPLETION_STUB


class AssistantService(BaseService):
    module = "ai_messages"

    def _owned_conversation(self, conversation_id: int) -> models.AiConversation:
        """The conversation, if it belongs to the caller or the caller is an administrator."""
        conversation = assistant_repo.get_conversation(self.db, conversation_id)
        if conversation is None:
            raise self.not_found("Conversation")
        if conversation.user_id != self.user_id and not has_capability(self.current_user, CAP_MANAGE_OPTIONS):
            raise ServiceError("permission_denied", "You do not have permission to view this conversation.")
        return conversation

    def start_conversation(self, user_id: int, model: str = "claude") -> schemas.ConversationResponse:
        self.require_pro("AI Assistant")
        with self.unit_of_work("start conversation", invalidate=[]):
            conversation = assistant_repo.create_conversation(self.db, {
                "user_id": absint(user_id),
                "model": sanitize_text_field(model) or "claude",
                "total_messages": 0,
                "total_tokens": 0,
                "cost": 0.0,
            })
        return schemas.ConversationResponse.model_validate(conversation)

    def add_message(self, conversation_id: int, role: str, message: str, tokens: int = 0) -> schemas.MessageResponse:
        self.require_pro("AI Assistant")
        role = sanitize_text_field(role)
        if role not in MESSAGE_ROLES:
            raise ServiceError("invalid_role", "Invalid message role.")
        if assistant_repo.get_conversation(self.db, absint(conversation_id)) is None:
            raise self.not_found("Conversation")
        with self.unit_of_work("add message"):
            row = assistant_repo.insert_message(self.db, {
                "conversation_id": absint(conversation_id),
                "role": role,
                "message": kses_post(message),
                "tokens": absint(tokens),
            })
            assistant_repo.bump_totals(self.db, absint(conversation_id), tokens=absint(tokens))
        return schemas.MessageResponse.model_validate(row)

    def get_messages(self, conversation_id: int) -> List[schemas.MessageResponse]:
        self.require_pro("AI Assistant")
        conversation_id = absint(conversation_id)
        self._owned_conversation(conversation_id)
        return self.remember(
            cache.list_key(self.module, {"conversation_id": conversation_id}),
            lambda: [
                schemas.MessageResponse.model_validate(m)
                for m in assistant_repo.list_messages(self.db, conversation_id)
            ],
        )

    def get_usage_stats(self, user_id: int) -> Dict[str, Any]:
        if not is_pro_active(self.db):
            return {}
        return assistant_repo.usage_stats(self.db, absint(user_id))

    def query(self, message: str, history: Optional[List[Dict[str, str]]] = None) -> str:
        if not is_pro_active(self.db):
            raise ServiceError("pro_required", "PRO license required for AI Assistant")
        history = history or []

        if is_bug_report(message):
            return (
                "It sounds like you've encountered an issue. "
                f"Please report to **{SUPPORT_EMAIL}** with details:\n\n"
                "- What you were trying to do\n"
                "- What happened instead\n"
                "- Any error messages\n"
                "- Steps to reproduce\n\n"
                "Usually get response within 24-48 hours.\n\n"
                "Let me see if I can help with a workaround...\n\n"
            ) + _complete(message, history)

        if is_feature_request(message):
            found = existing_features(message)
            if found:
                preamble = "Good news - check out: " + ", ".join(found) + "\n\n"
            else:
                preamble = (
                    f"That feature isn't available yet. Submit request to **{SUPPORT_EMAIL}** "
                    "- they prioritize based on user demand.\n\n"
                )
            return preamble + _complete(message, history)

        return _complete(message, history)

    def ask(self, request: schemas.AssistantQuery) -> schemas.AssistantReply:
        """Record the user's message, answer it and record the answer."""
        self.require_pro("AI Assistant")
        conversation_id = request.conversation_id
        if conversation_id is None:
            conversation_id = self.start_conversation(self.user_id).id
        else:
            self._owned_conversation(conversation_id)
        self.add_message(conversation_id, "user", request.message)
        response = self.query(request.message, request.history)
        self.add_message(conversation_id, "assistant", response)
        return schemas.AssistantReply(conversation_id=conversation_id, response=response)
