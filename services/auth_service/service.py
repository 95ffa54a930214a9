import structlog
from fastapi import HTTPException, status
from passlib.context import CryptContext
from sqlalchemy.ext.asyncio import AsyncSession

from shared.config.settings import Settings
from shared.security.jwt_handler import create_access_token
from services.cart_service.repository import CartRepository

from .models import User
from .repository import UserRepository, normalize_email
from .schemas import PasswordChange, TokenResponse, UserCreate, UserLogin, UserUpdate

log = structlog.get_logger(__name__)

_pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


class AuthService:

    @staticmethod
    async def register(db: AsyncSession, data: UserCreate) -> User:
        if await UserRepository.email_taken(db, data.email):
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Email already registered")

        user = await UserRepository.add(
            db,
            User(
                email=data.email,
                hashed_password=_pwd_context.hash(data.password),
                full_name=data.full_name,
                address=data.address,
                phone=data.phone,
            ),
        )
        await db.commit()
        log.info("user_registered", user_id=user.id)
        return user

    @staticmethod
    async def login(db: AsyncSession, data: UserLogin, settings: Settings) -> TokenResponse:
        user = await UserRepository.get_by_email(db, data.email)
        # Same answer for unknown email and wrong password
        if user is None or not _pwd_context.verify(data.password, user.hashed_password):
            log.info("login_failed")
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Incorrect email or password",
                headers={"WWW-Authenticate": "Bearer"},
            )
        if not user.is_active:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Account is disabled")

        return TokenResponse(access_token=create_access_token({"sub": str(user.id)}, settings))

    @staticmethod
    async def get_profile(db: AsyncSession, user_id: int) -> User:
        user = await UserRepository.get_by_id(db, user_id)
        if user is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
        return user

    @staticmethod
    async def update_profile(db: AsyncSession, user_id: int, data: UserUpdate) -> User:
        user = await AuthService.get_profile(db, user_id)
        changes = data.model_dump(exclude_unset=True)

        if changes.get("email") is not None:
            changes["email"] = normalize_email(changes["email"])
            if changes["email"] != user.email and await UserRepository.email_taken(db, changes["email"]):
                raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Email already registered")
        else:
            # Email is the login, it cannot be cleared
            changes.pop("email", None)

        for field, value in changes.items():
            setattr(user, field, value)
        await db.commit()
        log.info("user_updated", user_id=user_id, fields=sorted(changes))
        return user

    @staticmethod
    async def change_password(db: AsyncSession, user_id: int, data: PasswordChange) -> None:
        user = await AuthService.get_profile(db, user_id)
        if not _pwd_context.verify(data.current_password, user.hashed_password):
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Incorrect password")

        user.hashed_password = _pwd_context.hash(data.new_password)
        await db.commit()
        log.info("password_changed", user_id=user_id)

    @staticmethod
    async def delete_account(db: AsyncSession, user_id: int) -> None:
        """Removes the account and its cart. Placed orders stay in the ledger."""
        user = await AuthService.get_profile(db, user_id)
        await CartRepository.delete_cart_lines(db, user_id)
        await UserRepository.delete(db, user)
        await db.commit()
        log.info("user_deleted", user_id=user_id)
