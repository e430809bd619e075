"""
Advocacy: issues being tracked, the campaigns run on them, and the actions
supporters take within a campaign.
"""
import csv
import io
import logging
from datetime import date, datetime, timedelta
from typing import Any, Dict, List, Optional

from nonprofitsuite.api.permissions import can_manage_advocacy
from nonprofitsuite.db import schemas
from nonprofitsuite.db.repositories import advocacy as advocacy_repo
from nonprofitsuite.errors import ServiceError
from nonprofitsuite.services.base import BaseService
from nonprofitsuite.utils import cache
from nonprofitsuite.utils.pagination import MAX_PER_PAGE, parse_pagination_args
from nonprofitsuite.utils.sanitize import (
    absint,
    filter_allowed,
    parse_date,
    parse_datetime,
    sanitize_text_field,
    sanitize_textarea_field,
)

logger = logging.getLogger(__name__)

ISSUE_STATUSES = ("monitoring", "active_campaign", "victory", "defeat", "inactive")
CAMPAIGN_STATUSES = ("planning", "active", "completed", "cancelled")
ISSUE_ORDERBY = ("id", "title", "status", "priority", "target_decision_date", "created_at")
CAMPAIGN_ORDERBY = ("id", "campaign_name", "start_date", "end_date", "status", "action_count", "goal_count")
DEFAULT_CAMPAIGN_LIMIT = 50
CSV_HEADER = ["Date", "Name", "Email", "Action Type", "Target", "Outcome"]

_ISSUE_UPDATE_FIELDS = {
    "title": "%s",
    "description": "%s",
    "status": "%s",
    "priority": "%s",
    "position": "%s",
    "current_stage": "%s",
    "target_decision_date": "date",
    "decision_date": "date",
    "outcome": "%s",
    "talking_points": "%s",
    "notes": "%s",
}
_CAMPAIGN_UPDATE_FIELDS = {
    "campaign_name": "%s",
    "description": "%s",
    "status": "%s",
    "end_date": "date",
    "call_to_action": "%s",
    "goal_count": "%d",
    "email_template": "%s",
    "letter_template": "%s",
    "talking_points": "%s",
}


def _campaign_response(campaign, issue_title: Optional[str]) -> schemas.CampaignResponse:
    return schemas.CampaignResponse.model_validate(campaign).model_copy(update={"issue_title": issue_title})


class AdvocacyService(BaseService):
    module = "advocacy"

    # Issues

    def create_issue(self, data: Dict[str, Any]) -> schemas.IssueResponse:
        can_manage_advocacy(self.current_user)
        title = sanitize_text_field(data.get("title"))
        issue_type = sanitize_text_field(data.get("issue_type"))
        if not title or not issue_type:
            raise ServiceError("missing_required", "Title and issue type are required.")
        status = sanitize_text_field(data.get("status")) or "monitoring"
        if status not in ISSUE_STATUSES:
            raise ServiceError("invalid_status", "Invalid issue status.")

        with self.unit_of_work("create issue"):
            issue = advocacy_repo.create_issue(self.db, {
                "title": title,
                "description": sanitize_textarea_field(data.get("description")) or None,
                "issue_type": issue_type,
                "jurisdiction": sanitize_text_field(data.get("jurisdiction")) or None,
                "bill_number": sanitize_text_field(data.get("bill_number")) or None,
                "status": status,
                "priority": sanitize_text_field(data.get("priority")) or "medium",
                "position": sanitize_text_field(data.get("position")) or None,
                "current_stage": sanitize_text_field(data.get("current_stage")) or None,
                "target_decision_date": parse_date(data.get("target_decision_date")),
                "talking_points": sanitize_textarea_field(data.get("talking_points")) or None,
                "notes": sanitize_textarea_field(data.get("notes")) or None,
                "created_by": self.user_id,
            })
        return schemas.IssueResponse.model_validate(issue)

    def get_issues(self, args: Optional[Dict[str, Any]] = None) -> schemas.Page:
        parsed = parse_pagination_args(args, ISSUE_ORDERBY, default_orderby="created_at")

        def _load():
            rows, total = advocacy_repo.list_issues(self.db, args=parsed)
            return self.to_page(rows, total, parsed, schemas.IssueResponse)

        return self.remember(cache.list_key("advocacy_issues", parsed.cache_args()), _load)

    def update_issue(self, issue_id: int, data: Dict[str, Any]) -> schemas.IssueResponse:
        can_manage_advocacy(self.current_user)
        values = filter_allowed(data, _ISSUE_UPDATE_FIELDS)
        if not values:
            raise ServiceError("no_data", "No valid fields to update.")
        if "status" in values and values["status"] not in ISSUE_STATUSES:
            raise ServiceError("invalid_status", "Invalid issue status.")
        issue = advocacy_repo.get_issue(self.db, issue_id)
        if issue is None:
            raise self.not_found("Issue")
        with self.unit_of_work("update issue"):
            for name, value in values.items():
                setattr(issue, name, value)
        return schemas.IssueResponse.model_validate(issue)

    def update_status(self, issue_id: int, new_status: str) -> schemas.IssueResponse:
        return self.update_issue(issue_id, {"status": new_status})

    def get_active_issues(self) -> schemas.Page:
        return self.get_issues({"status": "active_campaign", "orderby": "priority", "order": "DESC"})

    def get_issues_by_decision_date(self, days_ahead: int = 30) -> List[schemas.IssueResponse]:
        today = date.today()

        def _load():
            rows = advocacy_repo.list_issues_deciding_between(
                self.db, start=today, end=today + timedelta(days=days_ahead)
            )
            return [schemas.IssueResponse.model_validate(r) for r in rows]

        key = cache.list_key("advocacy_issues_upcoming", {"days_ahead": days_ahead, "today": today})
        return self.remember(key, _load)

    def get_issue_timeline(self, issue_id: int) -> List[Dict[str, Any]]:
        """Campaign start/end events for an issue, newest first."""
        timeline = []
        for campaign in advocacy_repo.list_issue_campaigns(self.db, issue_id):
            if campaign.start_date:
                timeline.append({
                    "date": campaign.start_date,
                    "type": "campaign_start",
                    "title": f"Started: {campaign.campaign_name}",
                })
            if campaign.end_date:
                timeline.append({
                    "date": campaign.end_date,
                    "type": "campaign_end",
                    "title": f"Ended: {campaign.campaign_name}",
                })
        timeline.sort(key=lambda entry: entry["date"], reverse=True)
        return timeline

    # Campaigns

    def create_campaign(self, issue_id: int, data: Dict[str, Any]) -> schemas.CampaignResponse:
        can_manage_advocacy(self.current_user)
        name = sanitize_text_field(data.get("campaign_name"))
        campaign_type = sanitize_text_field(data.get("campaign_type"))
        if not name or not campaign_type:
            raise ServiceError("missing_required", "Campaign name and type are required.")
        issue = advocacy_repo.get_issue(self.db, issue_id)
        if issue is None:
            raise self.not_found("Issue")
        status = sanitize_text_field(data.get("status")) or "planning"
        if status not in CAMPAIGN_STATUSES:
            raise ServiceError("invalid_status", "Invalid campaign status.")

        with self.unit_of_work("create campaign"):
            campaign = advocacy_repo.create_campaign(self.db, {
                "issue_id": issue.id,
                "campaign_name": name,
                "campaign_type": campaign_type,
                "description": sanitize_textarea_field(data.get("description")) or None,
                "status": status,
                "start_date": parse_date(data.get("start_date")) or date.today(),
                "end_date": parse_date(data.get("end_date")),
                "call_to_action": sanitize_textarea_field(data.get("call_to_action")) or None,
                "goal_count": absint(data.get("goal_count")),
                "action_count": 0,
                "email_template": sanitize_textarea_field(data.get("email_template")) or None,
                "letter_template": sanitize_textarea_field(data.get("letter_template")) or None,
                "talking_points": sanitize_textarea_field(data.get("talking_points")) or None,
            })
        return _campaign_response(campaign, issue.title)

    def get_campaign(self, campaign_id: int) -> schemas.CampaignResponse:
        def _load():
            row = advocacy_repo.get_campaign(self.db, campaign_id)
            return _campaign_response(*row) if row else None

        campaign = self.remember(cache.item_key("advocacy_campaigns", campaign_id), _load)
        if campaign is None:
            raise self.not_found("Campaign")
        return campaign

    def get_campaigns(self, args: Optional[Dict[str, Any]] = None) -> List[schemas.CampaignResponse]:
        args = args or {}
        orderby = args.get("orderby") if args.get("orderby") in CAMPAIGN_ORDERBY else "start_date"
        order = "ASC" if str(args.get("order", "DESC")).upper() == "ASC" else "DESC"
        limit = min(absint(args.get("limit", DEFAULT_CAMPAIGN_LIMIT)), MAX_PER_PAGE)
        filters = {
            "issue_id": absint(args.get("issue_id")) or None,
            "status": sanitize_text_field(args.get("status")) or None,
            "campaign_type": sanitize_text_field(args.get("campaign_type")) or None,
        }

        def _load():
            rows = advocacy_repo.list_campaigns(self.db, orderby=orderby, order=order, limit=limit, **filters)
            return [_campaign_response(c, title) for c, title in rows]

        key_args = dict(filters, orderby=orderby, order=order, limit=limit)
        return self.remember(cache.list_key("advocacy_campaigns", key_args), _load)

    def get_active_campaigns(self) -> List[schemas.CampaignResponse]:
        return self.get_campaigns({"status": "active"})

    def update_campaign(self, campaign_id: int, data: Dict[str, Any]) -> schemas.CampaignResponse:
        can_manage_advocacy(self.current_user)
        values = filter_allowed(data, _CAMPAIGN_UPDATE_FIELDS)
        if not values:
            raise ServiceError("no_data", "No valid fields to update.")
        if "status" in values and values["status"] not in CAMPAIGN_STATUSES:
            raise ServiceError("invalid_status", "Invalid campaign status.")
        row = advocacy_repo.get_campaign(self.db, campaign_id)
        if row is None:
            raise self.not_found("Campaign")
        campaign, issue_title = row
        with self.unit_of_work("update campaign"):
            for name, value in values.items():
                setattr(campaign, name, value)
        return _campaign_response(campaign, issue_title)

    def calculate_progress(self, campaign_id: int) -> int:
        """Percent of the goal reached, capped at 100; 0 without a goal."""
        row = advocacy_repo.get_campaign(self.db, campaign_id)
        if row is None or not row[0].goal_count:
            return 0
        campaign = row[0]
        return min(100, int(campaign.action_count * 100 / campaign.goal_count + 0.5))

    def increment_action_count(self, campaign_id: int) -> bool:
        can_manage_advocacy(self.current_user)
        with self.unit_of_work("increment action count"):
            updated = advocacy_repo.increment_action_count(self.db, campaign_id)
        return updated > 0

    def get_campaign_report(self, campaign_id: int) -> Dict[str, Any]:
        campaign = self.get_campaign(campaign_id)
        actions = advocacy_repo.list_actions(self.db, campaign_id)
        participants = {a.person_id for a, _ in actions if a.person_id}
        return {
            "campaign": campaign,
            "total_actions": len(actions),
            "action_breakdown": self.get_action_summary(campaign_id),
            "progress_percent": self.calculate_progress(campaign_id),
            "participants": len(participants),
        }

    def get_advocacy_dashboard(self) -> Dict[str, int]:
        return {
            "active_issues": advocacy_repo.count_issues(self.db, status="active_campaign"),
            "active_campaigns": advocacy_repo.count_campaigns(self.db, status="active"),
            "total_actions": advocacy_repo.total_action_count(self.db),
            "victories": advocacy_repo.count_issues(self.db, status="victory"),
        }

    # Actions

    def log_action(self, campaign_id: int, data: Dict[str, Any]) -> schemas.ActionResponse:
        """Record a supporter action and bump the campaign's action count together."""
        can_manage_advocacy(self.current_user)
        action_type = sanitize_text_field(data.get("action_type"))
        if not action_type:
            raise ServiceError("missing_required", "Action type is required.")
        if advocacy_repo.get_campaign(self.db, campaign_id) is None:
            raise self.not_found("Campaign")

        with self.unit_of_work("log action"):
            action = advocacy_repo.create_action(self.db, {
                "campaign_id": campaign_id,
                "person_id": absint(data.get("person_id")) or None,
                "action_type": action_type,
                "action_date": parse_datetime(data.get("action_date")) or datetime.now(),
                "target_name": sanitize_text_field(data.get("target_name")) or None,
                "target_office": sanitize_text_field(data.get("target_office")) or None,
                "outcome": sanitize_text_field(data.get("outcome")) or None,
                "notes": sanitize_textarea_field(data.get("notes")) or None,
            })
            advocacy_repo.increment_action_count(self.db, campaign_id)
        return schemas.ActionResponse.model_validate(action)

    def get_actions(self, campaign_id: int) -> List[schemas.ActionResponse]:
        results = []
        for action, person in advocacy_repo.list_actions(self.db, campaign_id):
            results.append(schemas.ActionResponse.model_validate(action).model_copy(update={
                "person_name": person.full_name if person else None,
                "person_email": person.email if person else None,
            }))
        return results

    def get_person_actions(self, person_id: int) -> List[schemas.ActionResponse]:
        return [
            schemas.ActionResponse.model_validate(action).model_copy(update={"campaign_name": name})
            for action, name in advocacy_repo.list_person_actions(self.db, person_id)
        ]

    def get_action_summary(self, campaign_id: int) -> Dict[str, int]:
        return {action_type: int(count) for action_type, count in advocacy_repo.action_summary(self.db, campaign_id)}

    def export_action_list(self, campaign_id: int) -> str:
        buf = io.StringIO()
        writer = csv.writer(buf, lineterminator="\n")
        writer.writerow(CSV_HEADER)
        for action in self.get_actions(campaign_id):
            writer.writerow([
                action.action_date.strftime("%Y-%m-%d %H:%M:%S"),
                action.person_name or "",
                action.person_email or "",
                action.action_type,
                action.target_name or "",
                action.outcome or "",
            ])
        return buf.getvalue()
