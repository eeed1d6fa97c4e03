"""JWT token utilities."""

from datetime import datetime, timedelta, timezone
from uuid import uuid4

import jwt
from pydantic import BaseModel

from idp.config import AuthSettings
from idp.util.error import JWTError


class TokenPayload(BaseModel):
    """JWT token payload."""

    user_id: str
    email: str | None = None
    phone_number: str | None = None
    jti: str
    exp: datetime


def create_token(
    user_id: str,
    email: str | None,
    phone_number: str | None,
    settings: AuthSettings,
    now: datetime,
) -> str:
    """Create a signed JWT for the user.

    Args:
        user_id: Subject claim
        email: Email claim, omitted when None
        phone_number: Phone claim, omitted when None
        settings: Authentication settings
        now: Issue time

    Returns:
        Encoded JWT token
    """
    payload = {
        "sub": user_id,
        "jti": uuid4().hex,
        "iat": now,
        "exp": now + timedelta(minutes=settings.jwt_expiry_minutes),
        "iss": settings.jwt_issuer,
        "aud": settings.jwt_audience,
    }
    if email:
        payload["email"] = email
    if phone_number:
        payload["phone_number"] = phone_number

    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def verify_token(token: str, settings: AuthSettings, now: datetime) -> TokenPayload:
    """Verify and decode a JWT token.

    Signature, algorithm, issuer and audience are checked by PyJWT. Expiry
    is checked here against ``now`` with no leeway so callers can supply
    their own clock.

    Args:
        token: JWT token to verify
        settings: Authentication settings
        now: Current time

    Returns:
        Token payload if valid

    Raises:
        JWTError: If token is invalid or expired
    """
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            audience=settings.jwt_audience,
            issuer=settings.jwt_issuer,
            options={
                "require": ["sub", "exp", "iss", "aud", "jti"],
                "verify_exp": False,
                "verify_iat": False,
            },
        )
    except jwt.InvalidTokenError:
        raise JWTError("Invalid token")

    expiry = datetime.fromtimestamp(payload["exp"], tz=timezone.utc)
    if now >= expiry:
        raise JWTError("Token has expired")

    return TokenPayload(
        user_id=payload["sub"],
        email=payload.get("email"),
        phone_number=payload.get("phone_number"),
        jti=payload["jti"],
        exp=expiry,
    )
