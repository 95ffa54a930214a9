from typing import Optional

from pydantic import BaseModel, EmailStr, Field


class UserCreate(BaseModel):
    email: EmailStr
    password: str = Field(min_length=8, max_length=72) # bcrypt input limit
    full_name: Optional[str] = None
    address: Optional[str] = None
    phone: Optional[str] = None


class UserLogin(BaseModel):
    email: EmailStr
    password: str


class UserUpdate(BaseModel):
    """Profile fields; only those present in the request body are changed."""

    email: Optional[EmailStr] = None
    full_name: Optional[str] = None
    address: Optional[str] = None
    phone: Optional[str] = None


class PasswordChange(BaseModel):
    current_password: str
    new_password: str = Field(min_length=8, max_length=72)


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"


class UserResponse(BaseModel):
    id: int
    email: str
    full_name: Optional[str]
    address: Optional[str]
    phone: Optional[str]
    is_active: bool

    class Config:
        from_attributes = True


class EmailExistsResponse(BaseModel):
    exists: bool


class MessageResponse(BaseModel):
    message: str
