"""
用户模型 - 身份记录

邮箱统一转小写，唯一性按小写比较
"""

from __future__ import annotations

from datetime import datetime

from pydantic import Field, field_validator

from .base import WireModel


class UserCreate(WireModel):
    """注册参数"""
    email: str
    password: str = Field(..., repr=False, description="凭据（不透明）")
    full_name: str
    company_name: str | None = None
    is_verified: bool = False

    @field_validator("email")
    @classmethod
    def _normalize_email(cls, v: str) -> str:
        v = v.strip().lower()
        if "@" not in v:
            raise ValueError("invalid email address")
        return v


class User(UserCreate):
    """用户实体"""
    id: str = Field(..., description="UUID")
    verification_token: str | None = None
    created_at: datetime = Field(default_factory=datetime.now)
