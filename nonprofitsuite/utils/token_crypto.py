"""
Token generation, parsing, and hashing utilities for mobile API tokens.

- Token strings look like ``ns_pat_<token_id>_<secret>``
- Secrets are hashed with Argon2id; only the hash is persisted
- ``token_id`` is plain hex so rows can be looked up without the secret
"""
from __future__ import annotations

import secrets
import uuid
from dataclasses import dataclass
from typing import Optional, Tuple

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError, VerifyMismatchError
from argon2.low_level import Type

_hasher = PasswordHasher(time_cost=2, memory_cost=65536, parallelism=2, hash_len=32, type=Type.ID)

TOKEN_PREFIX = "ns_pat_"


@dataclass(frozen=True)
class ParsedToken:
    token_id: str
    secret: str


def generate_token_id() -> str:
    """Return a short hex id suitable for DB lookup and logs."""
    return uuid.uuid4().hex[:16]


def generate_secret(length: int = 32) -> str:
    return secrets.token_urlsafe(length)


def build_token_string(token_id: str, secret: str) -> str:
    return f"{TOKEN_PREFIX}{token_id}_{secret}"


def parse_token(token: Optional[str]) -> Optional[ParsedToken]:
    """Split a token string into id and secret; None if malformed."""
    if not token or not token.startswith(TOKEN_PREFIX):
        return None
    body = token[len(TOKEN_PREFIX):]
    # token_id is hex, the secret may itself contain '_'
    idx = body.find("_")
    if idx <= 0:
        return None
    token_id, secret = body[:idx], body[idx + 1:]
    if not secret:
        return None
    return ParsedToken(token_id=token_id, secret=secret)


def hash_secret(secret: str) -> str:
    return _hasher.hash(secret)


def verify_secret(secret: str, encoded_hash: str) -> bool:
    if not secret or not encoded_hash:
        return False
    try:
        return _hasher.verify(encoded_hash, secret)
    except (VerifyMismatchError, VerificationError, InvalidHashError):
        return False


def generate_token() -> Tuple[str, str, str]:
    """Generate a new token and return (token_id, secret, full_token)."""
    tid = generate_token_id()
    sec = generate_secret()
    return tid, sec, build_token_string(tid, sec)
