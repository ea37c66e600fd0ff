"""
模块接口契约 - 定义各存储模块的抽象接口

设计原则：
1. 模块间通过接口通信，不直接依赖具体实现
2. 父记录存储（文档/签章）删除时必须同步调用落位引擎的级联钩子
3. 便于单元测试和mock替换

使用方式：
    from signdesk.interfaces import IDocumentStore

    class MyDocumentStore(IDocumentStore):
        def document_exists(self, document_id: str) -> bool:
            ...
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .models import (
        AppliedSignature,
        Document,
        DocumentCreate,
        DocumentStatus,
        PlacementRequest,
        Position,
        SignatureCreate,
        SignatureProfile,
        User,
        UserCreate,
    )


# ============================================================================
# 身份与父记录存储接口
# ============================================================================

class IUserStore(ABC):
    """用户存储接口"""

    @abstractmethod
    def create_user(
        self, data: UserCreate, verification_token: str | None = None
    ) -> User:
        """
        创建用户

        Raises:
            DuplicateError: 邮箱或验证令牌已被占用
        """
        ...

    @abstractmethod
    def get_user(self, user_id: str) -> User | None:
        """按ID获取用户"""
        ...

    @abstractmethod
    def get_user_by_email(self, email: str) -> User | None:
        """按邮箱获取用户（不区分大小写）"""
        ...

    @abstractmethod
    def get_user_by_verification_token(self, token: str) -> User | None:
        """按验证令牌获取用户"""
        ...

    @abstractmethod
    def update_user(self, user_id: str, **updates: Any) -> User | None:
        """部分更新用户，不存在时返回None"""
        ...


class ISignatureStore(ABC):
    """签章配置存储接口"""

    @abstractmethod
    def create_signature(self, data: SignatureCreate) -> SignatureProfile:
        """创建签章配置"""
        ...

    @abstractmethod
    def get_signature(self, signature_id: str) -> SignatureProfile | None:
        """获取签章配置"""
        ...

    @abstractmethod
    def signature_exists(self, signature_id: str) -> bool:
        """签章配置是否存在"""
        ...

    @abstractmethod
    def delete_signature(self, signature_id: str) -> None:
        """
        删除签章配置

        必须先调用 IPlacementEngine.cascade_on_signature_deleted，
        再移除自身记录。目标不存在时为空操作。
        """
        ...


class IDocumentStore(ABC):
    """文档存储接口"""

    @abstractmethod
    def create_document(self, data: DocumentCreate) -> Document:
        """登记上传的文档"""
        ...

    @abstractmethod
    def get_document(self, document_id: str) -> Document | None:
        """获取文档"""
        ...

    @abstractmethod
    def document_exists(self, document_id: str) -> bool:
        """文档是否存在"""
        ...

    @abstractmethod
    def update_document_status(
        self,
        document_id: str,
        status: DocumentStatus | str,
        page_count: int | None = None,
        page_sizes: str | None = None,
    ) -> Document | None:
        """更新处理状态（可选同时更新页数/页面尺寸）"""
        ...

    @abstractmethod
    def delete_document(self, document_id: str) -> None:
        """
        删除文档

        必须先调用 IPlacementEngine.cascade_on_document_deleted，
        再移除自身记录。目标不存在时为空操作。
        """
        ...


# ============================================================================
# 签章落位引擎接口
# ============================================================================

class IPlacementEngine(ABC):
    """签章落位引擎接口 - 落位集合的唯一写入方"""

    @abstractmethod
    def apply_placement(
        self,
        request: PlacementRequest | dict[str, Any],
        is_bulk_page_operation: bool = False,
    ) -> AppliedSignature:
        """
        落位签章（查找-创建-或-更新）

        Args:
            request: 落位请求（documentId/signatureId/pageNumber/position）
            is_bulk_page_operation: 是否为"应用到所有页"批量操作

        Returns:
            新建或原地更新后的落位记录

        Raises:
            ValidationError: 请求字段不合法（不产生任何修改）
        """
        ...

    @abstractmethod
    def reposition_placement(
        self, placement_id: str, new_position: Position | dict[str, Any]
    ) -> AppliedSignature:
        """
        替换落位位置，保留ID与落位时间

        Raises:
            NotFoundError: 落位记录不存在
        """
        ...

    @abstractmethod
    def list_for_document(self, document_id: str) -> list[AppliedSignature]:
        """列出文档上的全部落位（按插入顺序）"""
        ...

    @abstractmethod
    def remove_one(self, placement_id: str) -> int:
        """删除单条落位，不存在时为空操作"""
        ...

    @abstractmethod
    def remove_all_on_page(self, document_id: str, page_number: int) -> int:
        """删除文档某页上的全部落位"""
        ...

    @abstractmethod
    def remove_all_for_document(self, document_id: str) -> int:
        """删除文档上的全部落位"""
        ...

    @abstractmethod
    def cascade_on_signature_deleted(self, signature_id: str) -> int:
        """签章配置删除时的级联钩子"""
        ...

    @abstractmethod
    def cascade_on_document_deleted(self, document_id: str) -> int:
        """文档删除时的级联钩子"""
        ...


# ============================================================================
# 异常定义
# ============================================================================

class SignDeskError(Exception):
    """基础异常"""
    pass


class ValidationError(SignDeskError):
    """请求字段校验错误"""

    def __init__(self, message: str, errors: list[dict[str, Any]] | None = None):
        super().__init__(message)
        self.errors = errors or []


class NotFoundError(SignDeskError):
    """目标记录不存在"""
    pass


class ReferentialViolation(SignDeskError):
    """引用的文档/签章配置不存在"""
    pass


class DuplicateError(SignDeskError):
    """唯一字段冲突（邮箱/验证令牌）"""
    pass
