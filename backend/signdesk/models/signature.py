"""
签章配置模型 - 用户名下的签章定义

证书/私钥/密码由证书处理方生成和使用，这里只原样保存
"""

from __future__ import annotations

from datetime import datetime

from pydantic import Field

from .base import WireModel


class SignatureCreate(WireModel):
    """签章配置创建参数"""
    user_id: str
    name: str = Field(..., min_length=1, description="显示名称")

    # 签署人信息
    full_name: str
    company_name: str = ""
    location: str = ""
    time_zone: str = "UTC"

    # 证书材料（不透明）
    certificate: str
    private_key: str = Field(..., repr=False)
    signature_image: str | None = None
    password: str | None = Field(None, repr=False)


class SignatureProfile(SignatureCreate):
    """签章配置实体"""
    id: str = Field(..., description="UUID")
    created_at: datetime = Field(default_factory=datetime.now)
