"""Bearer token helpers.

Tokens are issued by the external identity provider and signed with the
shared ``SECRET_KEY``; this service only verifies them. ``create_access_token``
mints compatible tokens for local tooling and tests.
"""

from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt

from notifyhub.config import get_settings
from notifyhub.domain.entities import Recipient

DEFAULT_TOKEN_TTL = timedelta(minutes=30)


def create_access_token(
    subject: str,
    *,
    email: str | None = None,
    name: str | None = None,
    expires_delta: timedelta | None = None,
) -> str:
    settings = get_settings()
    expire = datetime.now(timezone.utc) + (expires_delta or DEFAULT_TOKEN_TTL)
    claims: dict[str, object] = {"sub": subject, "exp": expire}
    if email:
        claims["email"] = email
    if name:
        claims["name"] = name
    return jwt.encode(claims, settings.secret_key, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> dict:
    settings = get_settings()
    try:
        return jwt.decode(token, settings.secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError as exc:
        raise ValueError("Could not validate credentials") from exc


def recipient_from_token(token: str) -> Recipient:
    """Return the caller identity carried by ``token``."""

    claims = decode_access_token(token)
    subject = claims.get("sub")
    if not isinstance(subject, str) or not subject.strip():
        raise ValueError("Token does not identify a user")
    email = claims.get("email")
    name = claims.get("name")
    return Recipient(
        id=subject,
        email=email if isinstance(email, str) else None,
        name=name if isinstance(name, str) else None,
    )
