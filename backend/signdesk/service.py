"""
边界服务 - 组装各存储与落位引擎，并在调用引擎前完成引用校验

职责：
1. 落位请求的形状校验 + 文档/签章配置存在性校验（ReferentialViolation）
2. 同一文档上的操作按文档串行化；落位与签章配置删除按签章配置串行化
   （加锁顺序固定为：文档锁 -> 签章配置锁）
3. "应用到所有页"批量落位
4. 快照导出与恢复

测试要点：
- test_apply_unknown_document: 文档不存在时引擎不被调用
- test_apply_to_all_pages: 每页一条落位
- test_delete_document_cascades: 删除文档级联清除落位
- test_snapshot_roundtrip: 快照恢复后ID不变
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from .config import RuntimeConfig, get_config
from .interfaces import NotFoundError, ReferentialViolation, ValidationError
from .models import AppliedSignature, PlacementRequest, Position
from .storage import (
    DocumentStore,
    KeyedLocks,
    PlacementEngine,
    SignatureStore,
    Snapshot,
    UserStore,
    read_snapshot,
    write_snapshot,
)

logger = logging.getLogger(__name__)


class SignDesk:
    """签章落位服务"""

    def __init__(self, config: RuntimeConfig | None = None):
        self.config = config or get_config()
        self.locks = KeyedLocks()
        self.signature_locks = KeyedLocks()

        self.placements = PlacementEngine()
        self.users = UserStore()
        self.signatures = SignatureStore(self.placements)
        self.documents = DocumentStore(self.placements, self.config.documents.default_status)

    # ------------------------------------------------------------------
    # 落位
    # ------------------------------------------------------------------

    def apply_signature(
        self,
        request: PlacementRequest | Mapping[str, Any],
        all_pages: bool | None = None,
    ) -> AppliedSignature:
        """
        落位签章

        Args:
            request: 落位请求
            all_pages: 是否属于"应用到所有页"批量操作，缺省取配置

        Raises:
            ValidationError: 请求字段不合法
            ReferentialViolation: 文档或签章配置不存在
        """
        req = self.placements.validate_request(request)
        bulk = self.config.placement.default_bulk if all_pages is None else all_pages

        with self.locks.hold(req.document_id), self.signature_locks.hold(req.signature_id):
            self._check_references(req.document_id, req.signature_id)
            return self.placements.apply_placement(req, is_bulk_page_operation=bulk)

    def apply_to_all_pages(
        self,
        document_id: str,
        signature_id: str,
        position: Position | Mapping[str, Any],
    ) -> list[AppliedSignature]:
        """
        在文档每一页的相同位置落位签章

        该签章在此文档上的旧落位会先被清除，重复执行不会叠加。
        所有页的请求先整体校验，校验失败时不做任何修改。
        """
        with self.locks.hold(document_id), self.signature_locks.hold(signature_id):
            self._check_references(document_id, signature_id)
            document = self.documents.get_document(document_id)
            if document.page_count < 1:
                raise ValidationError(f"document {document_id} has no pages")

            requests = [
                self.placements.validate_request({
                    "document_id": document_id,
                    "signature_id": signature_id,
                    "page_number": page,
                    "position": position,
                })
                for page in range(1, document.page_count + 1)
            ]

            for applied in self.placements.list_for_document(document_id):
                if applied.signature_id == signature_id:
                    self.placements.remove_one(applied.id)

            results = [
                self.placements.apply_placement(r, is_bulk_page_operation=True)
                for r in requests
            ]

        logger.info(f"[{document_id}] 签章 {signature_id} 应用到全部 {len(results)} 页")
        return results

    def reposition_signature(
        self, placement_id: str, position: Position | Mapping[str, Any]
    ) -> AppliedSignature:
        """移动已落位签章"""
        new_position = self.placements.validate_position(position)
        document_id = self._document_of(placement_id)
        if document_id is None:
            raise NotFoundError(f"applied signature {placement_id} not found")

        with self.locks.hold(document_id):
            return self.placements.reposition_placement(placement_id, new_position)

    def remove_signature(self, placement_id: str) -> int:
        """删除单条落位"""
        document_id = self._document_of(placement_id)
        if document_id is None:
            return 0
        with self.locks.hold(document_id):
            return self.placements.remove_one(placement_id)

    def clear_page(self, document_id: str, page_number: int) -> int:
        """清除文档某页的全部落位"""
        with self.locks.hold(document_id):
            return self.placements.remove_all_on_page(document_id, page_number)

    def clear_document(self, document_id: str) -> int:
        """清除文档上的全部落位（文档本身保留）"""
        with self.locks.hold(document_id):
            return self.placements.remove_all_for_document(document_id)

    def document_signatures(self, document_id: str) -> list[AppliedSignature]:
        """列出文档上的全部落位"""
        return self.placements.list_for_document(document_id)

    # ------------------------------------------------------------------
    # 父记录删除
    # ------------------------------------------------------------------

    def delete_document(self, document_id: str) -> None:
        """删除文档及其全部落位"""
        with self.locks.hold(document_id):
            self.documents.delete_document(document_id)
        self.locks.discard(document_id)

    def delete_signature(self, signature_id: str) -> None:
        """删除签章配置及其在所有文档上的落位"""
        with self.signature_locks.hold(signature_id):
            self.signatures.delete_signature(signature_id)
        self.signature_locks.discard(signature_id)

    # ------------------------------------------------------------------
    # 快照
    # ------------------------------------------------------------------

    def snapshot(self) -> dict[str, Any]:
        """导出全部集合（线上格式）"""
        return Snapshot(
            users=self.users.list_users(),
            signatures=self.signatures.list_all(),
            documents=self.documents.list_all(),
            applied_signatures=self.placements.list_all(),
        ).to_wire()

    def restore(self, data: Mapping[str, Any]) -> None:
        """
        用快照内容替换当前全部集合

        先在新的存储实例中完整载入，成功后再切换，
        任何校验失败都不会影响当前数据。

        Raises:
            ValidationError: 快照结构不合法
            ReferentialViolation: 存在父记录缺失的落位
            DuplicateError: 用户邮箱/令牌重复
        """
        try:
            snapshot = Snapshot.model_validate(dict(data))
        except PydanticValidationError as e:
            raise ValidationError(
                "invalid snapshot", errors=e.errors(include_url=False)
            ) from e

        dangling = snapshot.dangling_placements()
        if dangling:
            raise ReferentialViolation(
                f"snapshot has {len(dangling)} applied signature(s) with missing parents"
            )

        placements = PlacementEngine()
        users = UserStore()
        signatures = SignatureStore(placements)
        documents = DocumentStore(placements, self.config.documents.default_status)

        users.load_records(snapshot.users)
        signatures.load_records(snapshot.signatures)
        documents.load_records(snapshot.documents)
        placements.load_records(snapshot.applied_signatures)

        self.placements = placements
        self.users = users
        self.signatures = signatures
        self.documents = documents
        logger.info(
            f"快照恢复完成: 文档{len(snapshot.documents)} 签章{len(snapshot.signatures)} "
            f"落位{len(snapshot.applied_signatures)}"
        )

    def save_snapshot(self, path: str | Path | None = None) -> Path:
        """写入快照文件，缺省路径取配置"""
        target = Path(path) if path else self.config.get_snapshot_path()
        write_snapshot(self.snapshot(), target)
        logger.info(f"快照已写入: {target}")
        return target

    def load_snapshot(self, path: str | Path | None = None) -> None:
        """从快照文件恢复"""
        source = Path(path) if path else self.config.get_snapshot_path()
        self.restore(read_snapshot(source))

    # ------------------------------------------------------------------
    # 内部
    # ------------------------------------------------------------------

    def _check_references(self, document_id: str, signature_id: str) -> None:
        if not self.documents.document_exists(document_id):
            raise ReferentialViolation(f"document {document_id} does not exist")
        if not self.signatures.signature_exists(signature_id):
            raise ReferentialViolation(f"signature {signature_id} does not exist")

    def _document_of(self, placement_id: str) -> str | None:
        applied = self.placements.get(placement_id)
        return applied.document_id if applied else None
