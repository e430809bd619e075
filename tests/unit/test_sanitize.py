from datetime import date, datetime

from nonprofitsuite.utils.sanitize import (
    absint,
    esc_url_raw,
    filter_allowed,
    is_valid_date,
    kses_post,
    parse_date,
    parse_datetime,
    sanitize_email,
    sanitize_text_field,
    sanitize_textarea_field,
)


def test_text_field_strips_tags_and_whitespace():
    assert sanitize_text_field("  <b>Jane</b>\n Doe<script>x()</script> ") == "Jane Doe"
    assert sanitize_text_field(None) == ""


def test_textarea_keeps_line_breaks():
    assert sanitize_textarea_field("line one\r\n<i>line</i>   two") == "line one\nline two"


def test_kses_post_drops_scripts_and_handlers():
    cleaned = kses_post('<p onclick="evil()">Hi</p><script>alert(1)</script><a href="javascript:x">y</a>')
    assert "<p>Hi</p>" in cleaned
    assert "script" not in cleaned
    assert "javascript:" not in cleaned


def test_absint_and_email_and_url():
    assert absint("-7") == 7
    assert absint("nope") == 0
    assert sanitize_email(" jane@example.org ") == "jane@example.org"
    assert sanitize_email("not-an-email") == ""
    assert esc_url_raw("https://example.org/x") == "https://example.org/x"
    assert esc_url_raw("javascript:alert(1)") == ""


def test_dates():
    assert parse_date("2026-03-01") == date(2026, 3, 1)
    assert parse_date("03/01/2026") is None
    assert parse_datetime("2026-03-01T10:30") == datetime(2026, 3, 1, 10, 30)
    assert is_valid_date("2026-02-28")
    assert not is_valid_date("2026-02-30")


def test_filter_allowed_only_keeps_listed_fields():
    cleaned = filter_allowed(
        {"notes": "<b>a</b>\nb", "donor_level": " gold ", "total_donated": 1_000_000},
        {"notes": "%s", "donor_level": "%s"},
    )
    assert cleaned == {"notes": "a\nb", "donor_level": "gold"}
