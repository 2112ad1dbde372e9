from pydantic import EmailStr, field_validator
from datetime import datetime
from typing import Optional
from app.schemas.common import CamelModel


class UserRegister(CamelModel):
    name: str
    email: EmailStr
    password: str

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        v = v.strip()
        if len(v) < 2:
            raise ValueError("Name must be at least 2 characters")
        return v

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        if len(v) < 6:
            raise ValueError("Password must be at least 6 characters")
        return v


class UserLogin(CamelModel):
    email: EmailStr
    password: str


class AuthorSummary(CamelModel):
    id: str
    name: str
    email: str


class User(AuthorSummary):
    created_at: datetime
    last_login: Optional[datetime] = None


class RegisterResponse(CamelModel):
    message: str
    user: User


class TokenResponse(CamelModel):
    message: str
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    user: User
