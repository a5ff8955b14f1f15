from pydantic import BaseModel, Field, computed_field, field_validator, ConfigDict
from typing import Optional
from datetime import datetime, timezone
from tinylink.config import settings


class LinkCreate(BaseModel):
    url: str = Field(..., description="The target URL (absolute http/https)")
    code: Optional[str] = Field(None, description="Custom code, 6-8 alphanumeric characters")

    @field_validator("url", mode="before")
    @classmethod
    def strip_url(cls, value):
        return value.strip() if isinstance(value, str) else value

    @field_validator("code", mode="before")
    @classmethod
    def blank_code_means_generate(cls, value):
        """An empty custom code asks for a generated one"""
        if value is None:
            return None
        value = str(value).strip()
        return value or None


class LinkRecord(BaseModel):
    """A link as every storage backend returns it.

    from_attributes=True lets the SQL backend hand over ORM rows directly.
    """
    code: str
    url: str
    clicks: int = 0
    last_clicked: Optional[datetime] = None
    created_at: datetime

    @field_validator("last_clicked", "created_at")
    @classmethod
    def assume_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        # SQLite drops tzinfo on the way back
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    model_config = ConfigDict(from_attributes=True)


class LinkResponse(LinkRecord):
    @computed_field
    @property
    def short_url(self) -> str:
        return f"{settings.base_url.rstrip('/')}/{self.code}"
