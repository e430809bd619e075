"""Runtime environment helpers for guarding development-only flags."""

import os
from typing import Optional, Set
from urllib.parse import urlparse

_LOCAL_HOSTS: Set[str] = {"localhost", "127.0.0.1", "::1"}


def _extract_hostname(url_value: str) -> Optional[str]:
    if not url_value or not url_value.strip():
        return None
    url_value = url_value.strip()
    candidate = url_value if "://" in url_value else f"http://{url_value}"
    return urlparse(candidate).hostname


def _allowed_dev_hosts() -> Set[str]:
    extra = os.getenv("DEV_MODE_ALLOWED_HOSTS", "")
    allowed = set(_LOCAL_HOSTS)
    if extra:
        allowed.update({host.strip().lower() for host in extra.split(",") if host.strip()})
    return allowed


def dev_mode_requested() -> bool:
    return os.getenv("DEV_MODE", "false").lower() == "true"


def dev_mode_active() -> bool:
    """Return True if dev-user impersonation is enabled and allowed.

    DEV_MODE is only honoured when APP_BASE_URL points at a local host (or one
    listed in DEV_MODE_ALLOWED_HOSTS), so a production deployment cannot
    silently act as the dev administrator.
    """
    if not dev_mode_requested():
        return False

    hostname = _extract_hostname(os.getenv("APP_BASE_URL", ""))
    allowed_hosts = _allowed_dev_hosts()
    if hostname:
        if hostname.lower() not in allowed_hosts:
            raise RuntimeError(
                "DEV_MODE=true is not permitted when APP_BASE_URL points to "
                f"'{hostname}'. Allowed hosts: {sorted(allowed_hosts)}"
            )
    elif os.getenv("ALLOW_DEV_MODE", "false").lower() != "true" and not os.getenv("PYTEST_CURRENT_TEST"):
        raise RuntimeError(
            "DEV_MODE=true requires APP_BASE_URL to be set to a localhost URL "
            "or ALLOW_DEV_MODE=true for non-local execution."
        )
    return True


def site_url() -> str:
    """Public base URL of this installation."""
    return os.getenv("APP_BASE_URL", "http://localhost:8000").rstrip("/")
