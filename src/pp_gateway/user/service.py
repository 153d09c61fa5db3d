"""User service: register, login, refresh.

register runs inside the router's `async with db.begin()` block so the
users row and its accounts row land together.
"""

from sqlalchemy import select, text
from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.pp_common.errors import (
    AccountDisabledError,
    InvalidCredentialsError,
    UsernameExistsError,
)
from src.pp_gateway.auth.jwt_handler import (
    create_access_token,
    create_refresh_token,
    decode_token,
)
from src.pp_gateway.auth.password import hash_password, verify_password
from src.pp_gateway.user.db_models import UserModel

_CREATE_ACCOUNT_SQL = text(
    "INSERT INTO accounts (user_id, balance, version) VALUES (:user_id, 0, 0)"
)


def has_admin_rights(user: UserModel) -> bool:
    """Stored flag, or a username listed in settings.ADMIN_USERNAMES."""
    return bool(user.is_admin) or user.username in settings.ADMIN_USERNAMES


class UserService:
    """Stateless service — instantiate once, reuse across requests."""

    async def register(self, username: str, password: str, db: AsyncSession) -> UserModel:
        # DB UNIQUE constraint is the final guard
        result = await db.execute(select(UserModel).where(UserModel.username == username))
        if result.scalar_one_or_none() is not None:
            raise UsernameExistsError()

        user = UserModel(
            username=username,
            password_hash=hash_password(password),
            is_active=True,
            is_admin=username in settings.ADMIN_USERNAMES,
        )
        db.add(user)
        await db.flush()  # assigns user.id

        await db.execute(_CREATE_ACCOUNT_SQL, {"user_id": str(user.id)})
        return user

    async def login(
        self, username: str, password: str, db: AsyncSession
    ) -> tuple[UserModel, str, str]:
        """Return (user, access_token, refresh_token).

        Unknown user and wrong password raise the same error so usernames
        cannot be enumerated.
        """
        result = await db.execute(select(UserModel).where(UserModel.username == username))
        user = result.scalar_one_or_none()

        if user is None or not verify_password(password, user.password_hash):
            raise InvalidCredentialsError()

        if not user.is_active:
            raise AccountDisabledError()

        user_id = str(user.id)
        return user, create_access_token(user_id), create_refresh_token(user_id)

    async def refresh(self, refresh_token: str) -> str:
        payload = decode_token(refresh_token, expected_type="refresh")
        return create_access_token(str(payload["sub"]))
