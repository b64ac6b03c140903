"""FastAPI dependencies: get_current_user, require_admin.

The auth service has already authenticated the caller; this layer only verifies
the bearer token and exposes the (user_id, role) pair to routers:

    @router.get("/protected")
    async def protected(user: Annotated[CurrentUser, Depends(get_current_user)]):
        ...
"""

from dataclasses import dataclass

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer

from src.cw_common.enums import UserRole
from src.cw_common.errors import ForbiddenError, InvalidCredentialsError
from src.cw_gateway.auth.jwt_handler import decode_token

# tokenUrl points at the auth service's login endpoint (Swagger "Authorize" button)
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login")

# Reusable 401 exception with WWW-Authenticate header (OAuth2 standard)
_CREDENTIALS_EXCEPTION = HTTPException(
    status_code=status.HTTP_401_UNAUTHORIZED,
    detail="Invalid or expired token",
    headers={"WWW-Authenticate": "Bearer"},
)


@dataclass(frozen=True)
class CurrentUser:
    user_id: int
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN.value


async def get_current_user(token: str = Depends(oauth2_scheme)) -> CurrentUser:
    """Validate the Bearer token and return the verified identity. HTTP 401 otherwise."""
    try:
        payload = decode_token(token)
    except InvalidCredentialsError:
        raise _CREDENTIALS_EXCEPTION from None

    return CurrentUser(
        user_id=int(payload["sub"]),
        role=payload.get("role", UserRole.USER.value),
    )


async def require_admin(
    current_user: CurrentUser = Depends(get_current_user),
) -> CurrentUser:
    """Raise ForbiddenError (1006, HTTP 403) unless the caller has the admin role."""
    if not current_user.is_admin:
        raise ForbiddenError()
    return current_user
