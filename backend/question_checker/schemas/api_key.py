"""
API key management schemas. Keys are never returned in full, only masked.
"""
from datetime import datetime

from pydantic import BaseModel


class ApiKeyCreate(BaseModel):
    api_key: str


class ApiKeyBulkCreate(BaseModel):
    api_keys: str  # one key per line


class ApiKeyUpdate(BaseModel):
    is_active: bool


class ApiKeyResponse(BaseModel):
    id: str
    masked_key: str
    is_active: bool
    last_used_at: datetime | None = None
    error_count: int = 0


class ApiKeyListResponse(BaseModel):
    items: list[ApiKeyResponse]
    total: int
    active: int


class ApiKeyBulkResponse(BaseModel):
    added: int
    skipped_duplicates: int
    rejected: int
