"""
落位模型 - 签章在文档页面上的落位记录

线上格式：
    {id, documentId, signatureId, pageNumber>=1,
     position: {gridPosition, ...附加字段}, appliedAt}
"""

from __future__ import annotations

from datetime import datetime

from pydantic import Field, field_validator

from .base import WireModel


class Position(WireModel):
    """页面内位置：gridPosition 必填，其余布局字段原样透传"""
    grid_position: str = Field(..., strict=True, description="网格位置(如A1)")

    model_config = {
        "extra": "allow",
        "frozen": True,
    }

    @field_validator("grid_position")
    @classmethod
    def _grid_position_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("gridPosition must be a non-empty string")
        return v.strip()

    @property
    def extras(self) -> dict:
        """附加布局字段（坐标/尺寸等）"""
        return dict(self.model_extra or {})


class PlacementRequest(WireModel):
    """落位请求"""
    document_id: str = Field(..., strict=True)
    signature_id: str = Field(..., strict=True)
    page_number: int = Field(..., strict=True, ge=1)
    position: Position

    @field_validator("document_id", "signature_id")
    @classmethod
    def _id_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("identifier must be a non-empty string")
        return v

    @property
    def key(self) -> tuple[str, int, str]:
        return (self.document_id, self.page_number, self.signature_id)


class AppliedSignature(WireModel):
    """已落位签章（只由落位引擎创建和修改）"""
    id: str = Field(..., description="UUID")
    document_id: str
    signature_id: str
    page_number: int = Field(..., ge=1)
    position: Position
    applied_at: datetime = Field(default_factory=datetime.now)

    model_config = {
        "frozen": True,
    }

    @property
    def key(self) -> tuple[str, int, str]:
        """(document_id, page_number, signature_id) 唯一性键"""
        return (self.document_id, self.page_number, self.signature_id)
