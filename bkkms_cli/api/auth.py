"""Captcha and login endpoints."""

from __future__ import annotations

from ..core.http import Transport
from ..core.models import Captcha, LoginResult, UserProfile
from ..core.session import SessionState


def get_captcha(transport: Transport) -> Captcha:
    data = transport.get("/api/v1/captcha") or {}
    return Captcha(
        captcha_id=str(data.get("captcha_id") or ""),
        image=str(data.get("captcha") or ""),
        answer=data.get("captcha_str") or None,
    )


def login(transport: Transport, username: str, password: str, captcha: str, captcha_id: str) -> LoginResult:
    data = transport.post(
        "/api/v1/auth/login",
        {"username": username, "pwd": password, "captcha": captcha, "captcha_id": captcha_id},
    ) or {}
    return LoginResult(id=int(data.get("id") or 0), username=str(data.get("username") or ""), token=str(data.get("token") or ""))


def sign_in(
    transport: Transport,
    session: SessionState,
    username: str,
    password: str,
    captcha: str,
    captcha_id: str,
) -> UserProfile:
    """Log in and store the resulting token and profile in ``session``."""
    result = login(transport, username, password, captcha, captcha_id)
    profile = UserProfile(id=result.id, username=result.username or username)
    session.set_token(result.token)
    session.set_profile(profile)
    return profile
