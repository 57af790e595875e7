import uuid
from datetime import datetime

from pydantic import BaseModel, EmailStr, Field


# --- Auth requests ---

class UserRegisterRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=8, max_length=72)
    full_name: str | None = Field(default=None, max_length=255)


class UserLoginRequest(BaseModel):
    email: EmailStr
    password: str


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"


# --- Profile ---

class ProfileResponse(BaseModel):
    id: uuid.UUID
    email: str | None
    full_name: str | None
    created_at: datetime
    updated_at: datetime | None

    model_config = {"from_attributes": True}


class ProfileUpdateRequest(BaseModel):
    full_name: str | None = Field(default=None, max_length=255)
