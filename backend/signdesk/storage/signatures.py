"""
签章配置存储 - 用户名下签章定义的创建/查询/删除

删除时先调用落位引擎的级联钩子，再移除签章配置。
"""

from __future__ import annotations

import logging
import threading
import uuid
from collections.abc import Iterable

from ..interfaces import IPlacementEngine, ISignatureStore
from ..models import SignatureCreate, SignatureProfile

logger = logging.getLogger(__name__)


class SignatureStore(ISignatureStore):
    """内存签章配置存储"""

    def __init__(self, placements: IPlacementEngine):
        self._placements = placements
        self._signatures: dict[str, SignatureProfile] = {}
        self._lock = threading.RLock()

    def create_signature(self, data: SignatureCreate) -> SignatureProfile:
        """创建签章配置"""
        signature = SignatureProfile(id=str(uuid.uuid4()), **data.model_dump())
        with self._lock:
            self._signatures[signature.id] = signature
        logger.info(f"创建签章配置 {signature.id}: {signature.name} (用户 {signature.user_id})")
        return signature

    def get_signature(self, signature_id: str) -> SignatureProfile | None:
        return self._signatures.get(signature_id)

    def signature_exists(self, signature_id: str) -> bool:
        return signature_id in self._signatures

    def list_all(self) -> list[SignatureProfile]:
        """列出全部签章配置"""
        with self._lock:
            return list(self._signatures.values())

    def list_user_signatures(self, user_id: str) -> list[SignatureProfile]:
        """列出用户的全部签章配置"""
        with self._lock:
            return [s for s in self._signatures.values() if s.user_id == user_id]

    def delete_signature(self, signature_id: str) -> None:
        """删除签章配置（先级联清除落位）"""
        with self._lock:
            self._placements.cascade_on_signature_deleted(signature_id)
            if self._signatures.pop(signature_id, None) is not None:
                logger.info(f"删除签章配置 {signature_id}")

    def load_records(self, records: Iterable[SignatureProfile]) -> int:
        """载入已有签章配置（保留原ID，用于快照恢复）"""
        count = 0
        with self._lock:
            for record in records:
                self._signatures[record.id] = record
                count += 1
        return count
