"""Input sanitizing and validation helpers shared by every service."""
from __future__ import annotations

import re
from datetime import date, datetime
from typing import Any, Dict, Mapping, Optional
from urllib.parse import urlparse

_TAG_RE = re.compile(r"<[^>]*>")
_BLOCK_RE = re.compile(r"<(script|style)[^>]*>.*?</\1\s*>", re.IGNORECASE | re.DOTALL)
_EVENT_ATTR_RE = re.compile(r"\s+on[a-z]+\s*=\s*(\"[^\"]*\"|'[^']*'|[^\s>]+)", re.IGNORECASE)
_JS_URL_RE = re.compile(r"(href|src)\s*=\s*([\"']?)\s*javascript:[^\"'>\s]*\2", re.IGNORECASE)
_CONTROL_RE = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")
_EMAIL_RE = re.compile(r"^[A-Za-z0-9._%+\-']+@[A-Za-z0-9.\-]+\.[A-Za-z]{2,}$")
_TEXTAREA_NAMES = re.compile(r"description|notes|content|message|details")


def strip_tags(value: str) -> str:
    return _TAG_RE.sub("", _BLOCK_RE.sub("", value))


def sanitize_text_field(value: Any) -> str:
    """Single-line text: no tags, no control characters, collapsed whitespace."""
    if value is None:
        return ""
    text = strip_tags(str(value))
    text = _CONTROL_RE.sub("", text)
    text = re.sub(r"[\r\n\t ]+", " ", text)
    return text.strip()


def sanitize_textarea_field(value: Any) -> str:
    """Like ``sanitize_text_field`` but preserves line breaks."""
    if value is None:
        return ""
    text = strip_tags(str(value)).replace("\r\n", "\n")
    text = _CONTROL_RE.sub("", text)
    lines = [re.sub(r"[\t ]+", " ", line).strip() for line in text.split("\n")]
    return "\n".join(lines).strip()


def kses_post(value: Any) -> str:
    """Keep markup but drop script/style blocks, event handlers and javascript: urls."""
    if value is None:
        return ""
    text = _BLOCK_RE.sub("", str(value))
    text = _EVENT_ATTR_RE.sub("", text)
    return _JS_URL_RE.sub("", text)


def absint(value: Any) -> int:
    try:
        return abs(int(float(value)))
    except (TypeError, ValueError):
        return 0


def to_float(value: Any, default: float = 0.0) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def sanitize_email(value: Any) -> str:
    text = sanitize_text_field(value).replace(" ", "")
    return text if _EMAIL_RE.match(text) else ""


def esc_url_raw(value: Any) -> str:
    text = sanitize_text_field(value)
    if not text:
        return ""
    parsed = urlparse(text)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        return ""
    return text


def parse_date(value: Any) -> Optional[date]:
    """Return a ``date`` for ``Y-m-d`` strings, dates and datetimes; else None."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return datetime.strptime(str(value).strip()[:10], "%Y-%m-%d").date()
    except ValueError:
        return None


def parse_datetime(value: Any) -> Optional[datetime]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    text = str(value).strip().replace("T", " ")
    for fmt in ("%Y-%m-%d %H:%M:%S", "%Y-%m-%d %H:%M", "%Y-%m-%d"):
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue
    return None


def is_valid_date(value: Any) -> bool:
    return parse_date(value) is not None


def sanitize_by_format(name: str, value: Any, fmt: str) -> Any:
    """Sanitize one field according to its declared format.

    ``%d`` int, ``%f`` float, ``%s`` text, ``html`` filtered markup;
    ``date``/``datetime``/``bool`` cover the typed columns.
    """
    if fmt == "%d":
        return absint(value)
    if fmt == "%f":
        return to_float(value)
    if fmt == "date":
        return parse_date(value)
    if fmt == "datetime":
        return parse_datetime(value)
    if fmt == "bool":
        return bool(value) and str(value).lower() not in ("0", "false", "no", "off")
    if fmt == "email":
        return sanitize_email(value)
    if fmt == "url":
        return esc_url_raw(value)
    if fmt == "html":
        return kses_post(value)
    if _TEXTAREA_NAMES.search(name):
        return sanitize_textarea_field(value)
    return sanitize_text_field(value)


def filter_allowed(data: Optional[Mapping[str, Any]], allowed: Mapping[str, str]) -> Dict[str, Any]:
    """Keep only allow-listed fields, sanitizing each by its format."""
    cleaned: Dict[str, Any] = {}
    for name, fmt in allowed.items():
        if data is not None and name in data:
            value = data[name]
            cleaned[name] = None if value is None else sanitize_by_format(name, value, fmt)
    return cleaned
