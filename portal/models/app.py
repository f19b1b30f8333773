"""
App model definitions.

An App is a plain container for achievement lists and players.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class AppCreate(BaseModel):
    """Schema for creating an app."""

    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field("", max_length=2000)


class AppUpdate(BaseModel):
    """Schema for updating an app."""

    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=2000)


class App(BaseModel):
    """Complete app model."""

    model_config = ConfigDict(populate_by_name=True)

    id: UUID
    title: str
    description: str = ""
    created_at: datetime = Field(..., alias="createdAt")
    updated_at: datetime = Field(..., alias="updatedAt")
