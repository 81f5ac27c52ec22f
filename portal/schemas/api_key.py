from pydantic import Field
from typing import Optional, List
from datetime import datetime
from portal.models.api_key import ApiKeyStatusEnum
from portal.schemas.base import CamelModel


class ApiKeyCreate(CamelModel):
    key_name: Optional[str] = Field(None, max_length=100)
    permissions: Optional[List[str]] = None
    rate_limit: Optional[int] = Field(None, ge=1)
    expires_at: Optional[datetime] = None


class ApiKeyUpdate(CamelModel):
    key_name: Optional[str] = Field(None, max_length=100)
    permissions: Optional[List[str]] = None
    rate_limit: Optional[int] = Field(None, ge=1)


class ApiKeyResponse(CamelModel):
    """Key metadata. Never carries the secret."""
    id: int
    key_name: str
    key_prefix: str
    permissions: List[str] = []
    rate_limit: int
    status: ApiKeyStatusEnum
    last_used_at: Optional[datetime] = None
    usage_count: int = 0
    expires_at: Optional[datetime] = None
    revoked_at: Optional[datetime] = None
    created_at: datetime


class ApiKeyCreatedResponse(CamelModel):
    id: int
    key_name: str
    api_key: str
    key_prefix: str
    permissions: List[str]
    rate_limit: int
    expires_at: Optional[datetime] = None


class ApiKeyStats(CamelModel):
    key_name: str
    usage_count: int
    last_used_at: Optional[datetime] = None
    rate_limit: int
    remaining_today: int
