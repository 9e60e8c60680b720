from typing import Optional
from pydantic import BaseModel, EmailStr, field_validator

from app.core.validation import validate_password, validate_username

class RegisterRequest(BaseModel):
    username: str
    email: EmailStr
    password: str
    avatar_url: Optional[str] = None

    @field_validator("username")
    @classmethod
    def check_username(cls, v: str) -> str:
        return validate_username(v)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.lower()

    @field_validator("password")
    @classmethod
    def check_password(cls, v: str) -> str:
        return validate_password(v)

class LoginRequest(BaseModel):
    username: str  # username or email
    password: str

    @field_validator("username", "password")
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Missing required fields")
        return v

class LogoutResponse(BaseModel):
    message: str = "Logged out"
