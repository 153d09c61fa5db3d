"""FastAPI dependencies: get_current_user and require_admin.

Usage in any protected router:
    from src.pp_gateway.auth.dependencies import get_current_user, require_admin

    @router.put("/admin/config")
    async def update_config(admin: UserModel = Depends(require_admin)):
        ...
"""

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.pp_common.database import get_db_session
from src.pp_common.errors import AccountDisabledError, AdminRequiredError, InvalidCredentialsError
from src.pp_gateway.auth.jwt_handler import decode_token
from src.pp_gateway.user.db_models import UserModel
from src.pp_gateway.user.service import has_admin_rights

# tokenUrl tells Swagger UI where to get a token (used for the "Authorize" button)
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login")

_CREDENTIALS_EXCEPTION = HTTPException(
    status_code=status.HTTP_401_UNAUTHORIZED,
    detail="Invalid or expired token",
    headers={"WWW-Authenticate": "Bearer"},
)


async def get_current_user(
    token: str = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_db_session),
) -> UserModel:
    """Resolve the Bearer token to an active UserModel (401 otherwise)."""
    try:
        payload = decode_token(token, expected_type="access")
    except InvalidCredentialsError:
        raise _CREDENTIALS_EXCEPTION from None

    result = await db.execute(select(UserModel).where(UserModel.id == payload["sub"]))
    user = result.scalar_one_or_none()
    if user is None:
        raise _CREDENTIALS_EXCEPTION

    if not user.is_active:
        raise AccountDisabledError()

    return user


async def require_admin(
    current_user: UserModel = Depends(get_current_user),
) -> UserModel:
    """Gate for privileged market operations: config, pause/resume, oracle push."""
    if not has_admin_rights(current_user):
        raise AdminRequiredError(str(current_user.id))
    return current_user
