"""
文档模型 - 上传的PDF元数据

状态值由外部文档处理方维护，这里只做登记
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import Field, TypeAdapter, field_validator
from pydantic import ValidationError as PydanticValidationError

from .base import WireModel


class DocumentStatus(str, Enum):
    """文档处理状态"""
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class PageSize(WireModel):
    """单页尺寸（PDF point）"""
    width: float
    height: float


_PAGE_SIZES = TypeAdapter(list[PageSize])


class DocumentCreate(WireModel):
    """文档登记参数"""
    user_id: str
    file_name: str = Field(..., description="存储文件名")
    original_name: str = Field(..., description="上传时的原始文件名")
    file_size: int = Field(0, ge=0)
    file_path: str
    page_count: int = Field(0, ge=0)
    page_sizes: str | None = Field(None, description="序列化的逐页尺寸列表(JSON)")
    status: DocumentStatus = DocumentStatus.PENDING

    @field_validator("page_sizes")
    @classmethod
    def _page_sizes_json(cls, v: str | None) -> str | None:
        """page_sizes 必须是 [{width, height}, ...] 形式的JSON，空串视为未设置"""
        if not v:
            return None
        try:
            _PAGE_SIZES.validate_json(v)
        except PydanticValidationError as e:
            raise ValueError("pageSizes must be a JSON list of {width, height} objects") from e
        return v


class Document(DocumentCreate):
    """文档实体"""
    id: str = Field(..., description="UUID")
    uploaded_at: datetime = Field(default_factory=datetime.now)

    def page_size_list(self) -> list[PageSize]:
        """解析 page_sizes，未设置时返回空列表"""
        if not self.page_sizes:
            return []
        return _PAGE_SIZES.validate_json(self.page_sizes)
