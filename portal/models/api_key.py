"""
API key model definitions.

A key grants access to exactly one list (and its app) until it expires.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class ApiKeyCreate(BaseModel):
    """Schema for issuing a key. Both fields are generated when omitted."""

    model_config = ConfigDict(populate_by_name=True)

    key: Optional[str] = Field(None, min_length=8, max_length=128)
    exp_date: Optional[datetime] = Field(None, alias="expDate")


class ApiKey(BaseModel):
    """Complete API key model."""

    model_config = ConfigDict(populate_by_name=True)

    id: UUID
    key: str
    list_id: UUID = Field(..., alias="listId")
    app_id: UUID = Field(..., alias="appId")
    exp_date: datetime = Field(..., alias="expDate")
    created_at: datetime = Field(..., alias="createdAt")


class ApiKeyScopeResponse(BaseModel):
    """What a key resolves to."""

    model_config = ConfigDict(populate_by_name=True)

    list_id: UUID = Field(..., alias="listId")
    app_id: UUID = Field(..., alias="appId")
