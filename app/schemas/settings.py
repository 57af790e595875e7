from datetime import datetime

from pydantic import BaseModel, Field


class UserSettingsResponse(BaseModel):
    openai_api_key_set: bool
    openai_api_key_hint: str | None
    gemini_api_key_set: bool
    gemini_api_key_hint: str | None
    default_model: str | None
    provider: str
    updated_at: datetime | None


class UserSettingsUpdate(BaseModel):
    openai_api_key: str | None = Field(default=None, max_length=512, repr=False)
    gemini_api_key: str | None = Field(default=None, max_length=512, repr=False)
    default_model: str | None = Field(default=None, max_length=100)
