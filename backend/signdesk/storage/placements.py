"""
签章落位引擎 - 落位记录的唯一写入方

职责：
1. 落位请求校验（全有或全无，校验失败不产生任何修改）
2. 按 (document_id, page_number, signature_id) 查找-创建-或-更新
3. 单条/按页/按文档删除
4. 文档、签章配置删除时的级联清理

测试要点：
- test_repeat_apply_updates_in_place: 非批量重复落位只保留一条，ID不变
- test_bulk_apply_creates_distinct: 批量模式每次新建
- test_remove_all_on_page: 只删除指定页
- test_reposition_missing: 不存在的ID报 NotFoundError
"""

from __future__ import annotations

import logging
import threading
import uuid
from collections.abc import Callable, Iterable, Mapping
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from ..interfaces import IPlacementEngine, NotFoundError, ValidationError
from ..models import AppliedSignature, PlacementRequest, Position

logger = logging.getLogger(__name__)

PlacementKey = tuple[str, int, str]


class PlacementEngine(IPlacementEngine):
    """内存落位引擎实现"""

    def __init__(self):
        self._placements: dict[str, AppliedSignature] = {}  # 按插入顺序
        self._index: dict[PlacementKey, list[str]] = {}  # 唯一性键 -> 落位ID
        self._lock = threading.RLock()

    # ------------------------------------------------------------------
    # 校验
    # ------------------------------------------------------------------

    @staticmethod
    def validate_request(request: PlacementRequest | Mapping[str, Any]) -> PlacementRequest:
        """校验并转换落位请求"""
        if isinstance(request, PlacementRequest):
            return request
        if not isinstance(request, Mapping):
            raise ValidationError("placement request must be a mapping")
        try:
            return PlacementRequest.model_validate(dict(request))
        except PydanticValidationError as e:
            raise ValidationError(
                f"invalid placement request: {e.error_count()} error(s)",
                errors=e.errors(include_url=False),
            ) from e

    @staticmethod
    def validate_position(position: Position | Mapping[str, Any]) -> Position:
        """校验位置对象"""
        if isinstance(position, Position):
            return position
        if not isinstance(position, Mapping):
            raise ValidationError("position must be a mapping")
        try:
            return Position.model_validate(dict(position))
        except PydanticValidationError as e:
            raise ValidationError(
                "invalid position", errors=e.errors(include_url=False)
            ) from e

    # ------------------------------------------------------------------
    # 写操作
    # ------------------------------------------------------------------

    def apply_placement(
        self,
        request: PlacementRequest | Mapping[str, Any],
        is_bulk_page_operation: bool = False,
    ) -> AppliedSignature:
        """落位签章"""
        req = self.validate_request(request)

        with self._lock:
            existing_id = self._find(req.key)
            if existing_id is not None and not is_bulk_page_operation:
                logger.debug(f"重复落位，改为更新位置: {existing_id}")
                return self.reposition_placement(existing_id, req.position)

            applied = AppliedSignature(
                id=str(uuid.uuid4()),
                document_id=req.document_id,
                signature_id=req.signature_id,
                page_number=req.page_number,
                position=req.position,
            )
            self._insert(applied)

        logger.info(
            f"[{applied.document_id}] 新增落位 {applied.id}: "
            f"签章={applied.signature_id} 页={applied.page_number}"
        )
        return applied

    def reposition_placement(
        self, placement_id: str, new_position: Position | Mapping[str, Any]
    ) -> AppliedSignature:
        """替换落位位置"""
        position = self.validate_position(new_position)

        with self._lock:
            existing = self._placements.get(placement_id)
            if existing is None:
                raise NotFoundError(f"applied signature {placement_id} not found")

            updated = existing.model_copy(update={"position": position})
            self._placements[placement_id] = updated

        logger.info(f"[{updated.document_id}] 更新落位位置 {placement_id}: {position.grid_position}")
        return updated

    def remove_one(self, placement_id: str) -> int:
        """删除单条落位"""
        with self._lock:
            removed = self._discard(placement_id)
        if removed:
            logger.info(f"删除落位 {placement_id}")
        return removed

    def remove_all_on_page(self, document_id: str, page_number: int) -> int:
        """删除文档某页上的全部落位"""
        removed = self._remove_where(
            lambda a: a.document_id == document_id and a.page_number == page_number
        )
        logger.info(f"[{document_id}] 清除第{page_number}页落位: {removed}条")
        return removed

    def remove_all_for_document(self, document_id: str) -> int:
        """删除文档上的全部落位"""
        removed = self._remove_where(lambda a: a.document_id == document_id)
        logger.info(f"[{document_id}] 清除全部落位: {removed}条")
        return removed

    def cascade_on_signature_deleted(self, signature_id: str) -> int:
        """签章配置删除级联"""
        removed = self._remove_where(lambda a: a.signature_id == signature_id)
        logger.info(f"签章配置 {signature_id} 删除，级联清除落位: {removed}条")
        return removed

    def cascade_on_document_deleted(self, document_id: str) -> int:
        """文档删除级联"""
        return self.remove_all_for_document(document_id)

    def load_records(self, records: Iterable[AppliedSignature]) -> int:
        """载入已有落位记录（保留原ID，用于快照恢复）"""
        count = 0
        with self._lock:
            for record in records:
                self._discard(record.id)
                self._insert(record)
                count += 1
        return count

    # ------------------------------------------------------------------
    # 读操作
    # ------------------------------------------------------------------

    def get(self, placement_id: str) -> AppliedSignature | None:
        """获取落位"""
        return self._placements.get(placement_id)

    def list_for_document(self, document_id: str) -> list[AppliedSignature]:
        """列出文档上的全部落位"""
        with self._lock:
            return [a for a in self._placements.values() if a.document_id == document_id]

    def list_all(self) -> list[AppliedSignature]:
        """列出全部落位"""
        with self._lock:
            return list(self._placements.values())

    def count(self) -> int:
        return len(self._placements)

    # ------------------------------------------------------------------
    # 集合与索引维护
    # ------------------------------------------------------------------

    def _find(self, key: PlacementKey) -> str | None:
        ids = self._index.get(key)
        return ids[0] if ids else None

    def _insert(self, applied: AppliedSignature) -> None:
        self._placements[applied.id] = applied
        self._index.setdefault(applied.key, []).append(applied.id)

    def _discard(self, placement_id: str) -> int:
        applied = self._placements.pop(placement_id, None)
        if applied is None:
            return 0

        ids = self._index.get(applied.key, [])
        if placement_id in ids:
            ids.remove(placement_id)
        if not ids:
            self._index.pop(applied.key, None)
        return 1

    def _remove_where(self, predicate: Callable[[AppliedSignature], bool]) -> int:
        with self._lock:
            targets = [a.id for a in self._placements.values() if predicate(a)]
            return sum(self._discard(pid) for pid in targets)
