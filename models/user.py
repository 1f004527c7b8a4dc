from pydantic import AliasChoices, BaseModel, EmailStr, Field, field_validator
from datetime import datetime
from typing import Optional


class Credentials(BaseModel):
    # Champs optionnels: l'absence est signalée par la route avec un message explicite
    email: Optional[str] = None
    password: Optional[str] = None

    @field_validator("email", mode="before")
    @classmethod
    def blank_email_is_missing(cls, value):
        if isinstance(value, str):
            value = value.strip()
            return value or None
        return value


class SignupRequest(Credentials):
    email: Optional[EmailStr] = None


class LoginRequest(Credentials):
    pass


class User(BaseModel):
    id: int
    email: str
    createdAt: Optional[datetime] = Field(default=None, validation_alias=AliasChoices("created_at", "createdAt"))

    class Config:
        from_attributes = True


class AuthResponse(BaseModel):
    message: str
    token: str
    user: User


class ProfileResponse(BaseModel):
    user: User
