# -*- coding: utf-8 -*-
"""Identity — signed bearer tokens + FastAPI helpers.

Tokens are HS256 JWTs whose ``sub`` claim is the caller principal. Verifying
them is the whole of authentication here: the record service only ever sees the
resulting principal text.
"""

from __future__ import annotations

import base64
import hashlib
import hmac
import json
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from fastapi import Depends, HTTPException, Request

from ..config import settings
from .models import ANONYMOUS_PRINCIPAL, is_anonymous

TOKEN_COOKIE_NAME = "medvault_token"


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _secret(secret: Optional[str]) -> str:
    return secret if secret is not None else settings.token_secret


def create_access_token(
    *,
    principal: str,
    secret: Optional[str] = None,
    ttl_days: Optional[int] = None,
) -> str:
    if is_anonymous(principal):
        raise ValueError("cannot issue a token for the anonymous principal")
    now = _utc_now()
    days = settings.token_ttl_days if ttl_days is None else ttl_days
    payload = {
        "sub": principal,
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(days=int(days))).timestamp()),
    }
    return _jwt_encode(payload, _secret(secret))


def decode_token(token: str, secret: Optional[str] = None) -> Dict[str, Any]:
    try:
        payload = _jwt_decode(token, _secret(secret))
    except Exception as exc:
        raise HTTPException(status_code=401, detail="Invalid token") from exc
    exp = int(payload.get("exp") or 0)
    if exp and exp < int(_utc_now().timestamp()):
        raise HTTPException(status_code=401, detail="Token expired")
    return payload


def _b64url_encode(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).decode("ascii").rstrip("=")


def _b64url_decode(data: str) -> bytes:
    pad = "=" * (-len(data) % 4)
    return base64.urlsafe_b64decode((data + pad).encode("ascii"))


def _sign(signing_input: bytes, secret: str) -> bytes:
    return hmac.new(secret.encode("utf-8"), signing_input, hashlib.sha256).digest()


def _jwt_encode(payload: Dict[str, Any], secret: str) -> str:
    header = {"alg": "HS256", "typ": "JWT"}
    header_b64 = _b64url_encode(json.dumps(header, separators=(",", ":")).encode("utf-8"))
    payload_b64 = _b64url_encode(json.dumps(payload, separators=(",", ":"), ensure_ascii=False).encode("utf-8"))
    signing_input = f"{header_b64}.{payload_b64}".encode("ascii")
    return f"{header_b64}.{payload_b64}.{_b64url_encode(_sign(signing_input, secret))}"


def _jwt_decode(token: str, secret: str) -> Dict[str, Any]:
    parts = token.split(".")
    if len(parts) != 3:
        raise ValueError("invalid token")
    header_b64, payload_b64, sig_b64 = parts
    header = json.loads(_b64url_decode(header_b64).decode("utf-8"))
    if not isinstance(header, dict) or header.get("alg") != "HS256":
        raise ValueError("unsupported algorithm")
    signing_input = f"{header_b64}.{payload_b64}".encode("ascii")
    if not hmac.compare_digest(_sign(signing_input, secret), _b64url_decode(sig_b64)):
        raise ValueError("bad signature")
    payload = json.loads(_b64url_decode(payload_b64).decode("utf-8"))
    if not isinstance(payload, dict):
        raise ValueError("bad payload")
    return payload


def get_token_from_request(request: Request) -> Optional[str]:
    auth = request.headers.get("authorization") or ""
    if auth.lower().startswith("bearer "):
        token = auth.split(" ", 1)[1].strip()
        return token or None
    cookie = request.cookies.get(TOKEN_COOKIE_NAME)
    return cookie or None


def resolve_principal(request: Request) -> str:
    """Caller principal for this request; anonymous when no token is presented."""
    cached = getattr(request.state, "principal", None)
    if cached:
        return cached

    token = get_token_from_request(request)
    if not token:
        principal = ANONYMOUS_PRINCIPAL
    else:
        payload = decode_token(token)
        principal = str(payload.get("sub") or "").strip()
        if not principal:
            raise HTTPException(status_code=401, detail="Invalid token")

    request.state.principal = principal
    return principal


def get_current_principal(principal: str = Depends(resolve_principal)) -> str:
    return principal
