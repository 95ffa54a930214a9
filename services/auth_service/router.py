from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from shared.config.database import get_db
from shared.config.settings import Settings, get_app_settings
from shared.security.dependencies import get_current_user

from .repository import UserRepository
from .schemas import (
    EmailExistsResponse,
    MessageResponse,
    PasswordChange,
    TokenResponse,
    UserCreate,
    UserLogin,
    UserResponse,
    UserUpdate,
)
from .service import AuthService

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def register(payload: UserCreate, db: AsyncSession = Depends(get_db)):
    return await AuthService.register(db, payload)


@router.post("/login", response_model=TokenResponse)
async def login(
    payload: UserLogin,
    settings: Settings = Depends(get_app_settings),
    db: AsyncSession = Depends(get_db),
):
    return await AuthService.login(db, payload, settings)


@router.get("/me", response_model=UserResponse)
async def me(user_id: str = Depends(get_current_user), db: AsyncSession = Depends(get_db)):
    return await AuthService.get_profile(db, int(user_id))


@router.put("/me", response_model=UserResponse)
async def update_me(
    payload: UserUpdate,
    user_id: str = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await AuthService.update_profile(db, int(user_id), payload)


@router.delete("/me", response_model=MessageResponse)
async def delete_me(user_id: str = Depends(get_current_user), db: AsyncSession = Depends(get_db)):
    await AuthService.delete_account(db, int(user_id))
    return MessageResponse(message="User deleted successfully")


@router.put("/me/password", response_model=MessageResponse)
async def change_password(
    payload: PasswordChange,
    user_id: str = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await AuthService.change_password(db, int(user_id), payload)
    return MessageResponse(message="Password updated successfully")


@router.get("/check-email", response_model=EmailExistsResponse)
async def check_email(email: str = Query(min_length=3), db: AsyncSession = Depends(get_db)):
    """Lets the sign-up form flag a taken address before submitting."""
    return EmailExistsResponse(exists=await UserRepository.email_taken(db, email))
