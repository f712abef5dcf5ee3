"""Pydantic schemas for Users."""
from __future__ import annotations
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, EmailStr, Field


class UserCreate(BaseModel):
    email: EmailStr
    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(min_length=1, max_length=100)
    password: str = Field(min_length=8, max_length=72)
    profile_image: Optional[str] = None


class UserSummary(BaseModel):
    """Display summary attached to organizers and participants."""

    user_id: str
    first_name: str
    last_name: str
    email: str
    profile_image: Optional[str] = None

    model_config = {"from_attributes": True}


class UserOut(UserSummary):
    created_at: datetime


class LoginRequest(BaseModel):
    email: EmailStr
    password: str
