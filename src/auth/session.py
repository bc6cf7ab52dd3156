"""
Password-Gated Sessions

The app has a single owner and a single shared password. A correct password
buys a signed, time-limited token carrying `{isAuthenticated, expiresAt}`.
The front end keeps the token for the browser session and re-verifies it on
every page render.

DESIGN DECISION: Verification failures of any kind (bad signature, garbled
token, expired) come back as None rather than raising. The caller only
needs to know whether to show the login form.
"""

import hmac
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
import structlog
from pydantic import BaseModel, ConfigDict, ValidationError
from pydantic.alias_generators import to_camel

from src.config import AuthSettings


logger = structlog.get_logger(__name__)


class AuthSession(BaseModel):
    """Claims carried by a session token."""
    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    is_authenticated: bool
    expires_at: int  # milliseconds since the epoch

    @property
    def expires_at_datetime(self) -> datetime:
        return datetime.fromtimestamp(self.expires_at / 1000, tz=timezone.utc)


def _now(now: Optional[datetime]) -> datetime:
    return now or datetime.now(timezone.utc)


def _to_millis(moment: datetime) -> int:
    return int(moment.timestamp() * 1000)


def create_session(
    password: str,
    settings: AuthSettings,
    now: Optional[datetime] = None,
) -> Optional[str]:
    """
    Issue a session token if the password matches.

    Returns:
        The encoded token, or None for a wrong password
    """
    if not hmac.compare_digest(password.encode(), settings.password.encode()):
        return None

    issued_at = _now(now)
    expires_at = issued_at + timedelta(days=settings.session_days)

    session = AuthSession(is_authenticated=True, expires_at=_to_millis(expires_at))
    claims = {
        **session.model_dump(by_alias=True),
        "iat": issued_at,
        "exp": expires_at,
    }
    return jwt.encode(claims, settings.session_secret, algorithm=settings.algorithm)


def verify_session(
    token: Optional[str],
    settings: AuthSettings,
    now: Optional[datetime] = None,
) -> Optional[AuthSession]:
    """
    Decode and check a session token.

    Returns:
        The session if the signature is good and it has not expired
    """
    if not token:
        return None

    try:
        claims = jwt.decode(
            token,
            settings.session_secret,
            algorithms=[settings.algorithm],
            # Time claims are checked below against `now` so the clock can be pinned.
            options={"verify_exp": False, "verify_iat": False},
        )
        session = AuthSession.model_validate(claims)
    except (jwt.InvalidTokenError, ValidationError) as e:
        logger.info("session_rejected", reason=type(e).__name__)
        return None

    if not is_authenticated(session, now):
        return None
    return session


def is_authenticated(
    session: Optional[AuthSession],
    now: Optional[datetime] = None,
) -> bool:
    """A session counts only while it is flagged and not yet expired."""
    return (
        session is not None
        and session.is_authenticated is True
        and _to_millis(_now(now)) < session.expires_at
    )
