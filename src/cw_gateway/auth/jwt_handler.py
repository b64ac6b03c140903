"""JWT access-token verification.

Tokens are issued by the auth service; this core only verifies them. Both sides
share one JWT_SECRET (HS256). Claims:
  sub:  integer user id (as a string, per RFC 7519)
  role: "user" | "admin"
  type: "access"

NOTE: No token revocation. Once issued, tokens are valid until expiry.
"""

from datetime import UTC, datetime, timedelta

from jose import JWTError, jwt

from config.settings import settings
from src.cw_common.enums import UserRole
from src.cw_common.errors import InvalidCredentialsError

_ALGORITHM = settings.JWT_ALGORITHM  # "HS256"
_ACCESS_EXPIRE = timedelta(minutes=settings.JWT_EXPIRE_MINUTES)


def create_access_token(
    user_id: int,
    role: str = UserRole.USER.value,
    expires_in: timedelta | None = None,
) -> str:
    """Issue an access token. Used by operator tooling and tests; production tokens come from auth."""
    now = datetime.now(UTC)
    payload = {
        "sub": str(user_id),
        "role": role,
        "type": "access",
        "iat": now,
        "exp": now + (expires_in if expires_in is not None else _ACCESS_EXPIRE),
    }
    return str(jwt.encode(payload, settings.JWT_SECRET, algorithm=_ALGORITHM))


def decode_token(token: str) -> dict[str, str]:
    """Decode and validate an access token.

    Raises:
        InvalidCredentialsError: signature invalid, token expired, wrong type,
                                 or `sub` is not an integer user id.
    """
    try:
        payload: dict[str, str] = jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[_ALGORITHM],  # Explicit list prevents algorithm confusion
        )
    except JWTError:
        raise InvalidCredentialsError() from None

    if payload.get("type") != "access":
        raise InvalidCredentialsError()
    if not str(payload.get("sub", "")).isdigit():
        raise InvalidCredentialsError()

    return payload
