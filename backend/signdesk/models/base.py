"""
模型基类 - 统一线上格式（camelCase 别名）
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel
from pydantic.alias_generators import to_camel


class WireModel(BaseModel):
    """Python 侧 snake_case，序列化为 camelCase"""

    model_config = {
        "alias_generator": to_camel,
        "populate_by_name": True,
    }

    def to_wire(self) -> dict[str, Any]:
        """导出为线上/持久化格式"""
        return self.model_dump(mode="json", by_alias=True)
