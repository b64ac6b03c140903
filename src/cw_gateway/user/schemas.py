"""Pydantic schemas for the internal registration hook."""

from pydantic import BaseModel, Field

from config.settings import settings


class RegisterUserRequest(BaseModel):
    user_id: int = Field(..., gt=0, description="Id assigned by the auth service")
    referrer_id: int | None = Field(None, gt=0, description="Direct referrer, if any")
    currency: str = Field(settings.DEFAULT_CURRENCY, min_length=3, max_length=10)


class UplineEdge(BaseModel):
    referrer_id: int
    level: int


class RegisterUserResponse(BaseModel):
    user_id: int
    currency: str
    referrer_id: int | None
    upline: list[UplineEdge]
