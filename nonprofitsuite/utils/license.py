"""
PRO license gate.

License state (key, status, last check, expiry) lives in the ``options``
table. An ``active`` status is trusted for one day before the license server
is consulted again. ``NONPROFITSUITE_DEV_MODE`` bypasses the check entirely.
"""
from __future__ import annotations

import logging
import os
import time
from functools import lru_cache
from typing import Any, Dict, Optional

import requests
from sqlalchemy.orm import Session

from nonprofitsuite.db.repositories import options as options_repo
from nonprofitsuite.errors import ServiceError
from nonprofitsuite.utils.runtime import site_url

logger = logging.getLogger(__name__)

DEFAULT_LICENSE_SERVER = "https://silverhost.net/api/licenses/"
LICENSE_CHECK_INTERVAL = 86400
_REQUEST_TIMEOUT = 15

OPT_KEY = "nonprofitsuite_license_key"
OPT_STATUS = "nonprofitsuite_license_status"
OPT_LAST_CHECK = "nonprofitsuite_license_last_check"
OPT_EXPIRES = "nonprofitsuite_license_expires"


def _normalize_bool(value: Optional[str], default: bool = False) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"", "0", "false", "no", "off"}:
        return False
    if normalized in {"1", "true", "yes", "on"}:
        return True
    return default


@lru_cache(maxsize=None)
def license_dev_mode() -> bool:
    """Return True when ``NONPROFITSUITE_DEV_MODE`` unlocks every PRO module."""
    return _normalize_bool(os.getenv("NONPROFITSUITE_DEV_MODE"))


@lru_cache(maxsize=None)
def license_server() -> str:
    url = os.getenv("NONPROFITSUITE_LICENSE_SERVER", DEFAULT_LICENSE_SERVER).strip()
    return url if url.endswith("/") else url + "/"


def refresh_license_cache() -> None:
    """Invalidate cached license configuration (useful for tests)."""
    license_dev_mode.cache_clear()
    license_server.cache_clear()


def _post(endpoint: str, license_key: str) -> Optional[Dict[str, Any]]:
    """POST to the license server; None on transport or decoding failure."""
    try:
        response = requests.post(
            license_server() + endpoint,
            json={"license_key": license_key, "site_url": site_url()},
            timeout=_REQUEST_TIMEOUT,
        )
        return response.json()
    except requests.RequestException as exc:
        logger.warning("license_request_failed: endpoint=%s error=%s", endpoint, exc)
        return None
    except ValueError:
        logger.warning("license_response_invalid: endpoint=%s", endpoint)
        return None


def stored_license_key(db: Session) -> Optional[str]:
    return options_repo.get_option(db, OPT_KEY) or os.getenv("NONPROFITSUITE_LICENSE_KEY") or None


def is_pro_active(db: Session) -> bool:
    if license_dev_mode():
        return True

    status = options_repo.get_option(db, OPT_STATUS)
    last_check = options_repo.get_option(db, OPT_LAST_CHECK, 0) or 0
    if status == "active" and (time.time() - float(last_check)) < LICENSE_CHECK_INTERVAL:
        return True

    license_key = stored_license_key(db)
    if license_key:
        return validate_license(db, license_key)
    return False


def validate_license(db: Session, license_key: str) -> bool:
    body = _post("validate", license_key)
    if body is None:
        return False
    if body.get("status") == "active":
        options_repo.update_option(db, OPT_STATUS, "active")
        options_repo.update_option(db, OPT_LAST_CHECK, int(time.time()))
        options_repo.update_option(db, OPT_EXPIRES, body.get("expires"))
        db.commit()
        return True
    options_repo.update_option(db, OPT_STATUS, "invalid")
    db.commit()
    return False


def activate_license(db: Session, license_key: str) -> Dict[str, Any]:
    body = _post("activate", license_key)
    if body is None:
        return {"success": False, "message": "Could not connect to license server."}
    if body.get("success"):
        options_repo.update_option(db, OPT_KEY, license_key)
        options_repo.update_option(db, OPT_STATUS, "active")
        options_repo.update_option(db, OPT_LAST_CHECK, int(time.time()))
        options_repo.update_option(db, OPT_EXPIRES, body.get("expires"))
        db.commit()
        return {"success": True, "message": "License activated successfully!"}
    return {"success": False, "message": body.get("message") or "Invalid license key."}


def deactivate_license(db: Session) -> bool:
    license_key = options_repo.get_option(db, OPT_KEY)
    if license_key:
        _post("deactivate", license_key)
    for name in (OPT_KEY, OPT_STATUS, OPT_LAST_CHECK, OPT_EXPIRES):
        options_repo.delete_option(db, name)
    db.commit()
    return True


def get_license_info(db: Session) -> Dict[str, Any]:
    license_key = options_repo.get_option(db, OPT_KEY) or ""
    return {
        "key": f"{license_key[:4]}...{license_key[-4:]}" if len(license_key) > 8 else license_key,
        "status": options_repo.get_option(db, OPT_STATUS, "inactive"),
        "expires": options_repo.get_option(db, OPT_EXPIRES),
        "is_pro": is_pro_active(db),
        "dev_mode": license_dev_mode(),
    }


def require_pro(db: Session, label: str) -> None:
    """Raise ``pro_required`` unless a PRO license is active."""
    if not is_pro_active(db):
        raise ServiceError("pro_required", f"{label} requires Pro license.")
