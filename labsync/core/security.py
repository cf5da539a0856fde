"""Bearer tokens signed with HMAC-SHA256.

Tokens are issued by the identity service; this module only has to agree on
the format ``base64url(json claims) "." base64url(signature)`` and on the
``exp`` claim. The claims the API reads are ``sub`` (username) and ``role``.
"""
import base64
import hashlib
import hmac
import json
import time
from typing import Any, Dict, Optional

DEFAULT_TTL_SECONDS = 60 * 60 * 24


def _b64url_encode(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def _b64url_decode(data: str) -> bytes:
    padding = "=" * (-len(data) % 4)
    return base64.urlsafe_b64decode((data + padding).encode("ascii"))


def _digest(message: bytes, secret: str) -> bytes:
    return hmac.new(secret.encode("utf-8"), message, hashlib.sha256).digest()


def sign(claims: Dict[str, Any], secret: str, ttl_seconds: int = DEFAULT_TTL_SECONDS) -> str:
    now = int(time.time())
    body = {**claims, "iat": now, "exp": now + int(ttl_seconds)}
    message = json.dumps(body, separators=(",", ":"), ensure_ascii=False).encode("utf-8")
    return _b64url_encode(message) + "." + _b64url_encode(_digest(message, secret))


def verify(token: str, secret: str, now: Optional[int] = None) -> Optional[Dict[str, Any]]:
    """Return the claims of a valid, unexpired token, else None."""
    message_part, sep, signature_part = token.partition(".")
    if not sep:
        return None

    try:
        message = _b64url_decode(message_part)
        signature = _b64url_decode(signature_part)
    except ValueError:
        return None

    if not hmac.compare_digest(signature, _digest(message, secret)):
        return None

    try:
        claims = json.loads(message.decode("utf-8"))
    except ValueError:
        return None
    if not isinstance(claims, dict):
        return None

    current = int(time.time()) if now is None else now
    if int(claims.get("exp", 0)) < current:
        return None
    return claims
