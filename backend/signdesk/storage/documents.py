"""
文档存储 - 上传PDF元数据的登记/查询/状态更新/删除

删除时先调用落位引擎的级联钩子，再移除文档记录，
保证任何时刻都不存在指向已删除文档的落位。
"""

from __future__ import annotations

import logging
import threading
import uuid
from collections.abc import Iterable

from pydantic import ValidationError as PydanticValidationError

from ..interfaces import IDocumentStore, IPlacementEngine, ValidationError
from ..models import Document, DocumentCreate, DocumentStatus

logger = logging.getLogger(__name__)


class DocumentStore(IDocumentStore):
    """内存文档存储"""

    def __init__(
        self,
        placements: IPlacementEngine,
        default_status: DocumentStatus = DocumentStatus.PENDING,
    ):
        self._placements = placements
        self._default_status = default_status
        self._documents: dict[str, Document] = {}
        self._lock = threading.RLock()

    def create_document(self, data: DocumentCreate) -> Document:
        """登记上传的文档"""
        fields = data.model_dump()
        if "status" not in data.model_fields_set:
            fields["status"] = self._default_status
        document = Document(id=str(uuid.uuid4()), **fields)
        with self._lock:
            self._documents[document.id] = document
        logger.info(f"登记文档 {document.id}: {document.original_name} ({document.page_count}页)")
        return document

    def get_document(self, document_id: str) -> Document | None:
        """获取文档"""
        return self._documents.get(document_id)

    def document_exists(self, document_id: str) -> bool:
        return document_id in self._documents

    def list_all(self) -> list[Document]:
        """列出全部文档"""
        with self._lock:
            return list(self._documents.values())

    def list_user_documents(self, user_id: str) -> list[Document]:
        """列出用户的全部文档"""
        with self._lock:
            return [d for d in self._documents.values() if d.user_id == user_id]

    def update_document_status(
        self,
        document_id: str,
        status: DocumentStatus | str,
        page_count: int | None = None,
        page_sizes: str | None = None,
    ) -> Document | None:
        """更新处理状态，未提供的页数/页面尺寸保持不变"""
        with self._lock:
            existing = self._documents.get(document_id)
            if existing is None:
                logger.warning(f"更新状态时文档不存在: {document_id}")
                return None

            try:
                updates = {"status": DocumentStatus(status)}
            except ValueError as e:
                raise ValidationError(f"unknown document status: {status}") from e
            if page_count is not None:
                updates["page_count"] = page_count
            if page_sizes is not None:
                updates["page_sizes"] = page_sizes

            try:
                updated = Document.model_validate({**existing.model_dump(), **updates})
            except PydanticValidationError as e:
                raise ValidationError(
                    "invalid document update", errors=e.errors(include_url=False)
                ) from e
            self._documents[document_id] = updated

        logger.info(f"[{document_id}] 状态更新: {updated.status.value}")
        return updated

    def delete_document(self, document_id: str) -> None:
        """删除文档（先级联清除落位）"""
        with self._lock:
            self._placements.cascade_on_document_deleted(document_id)
            if self._documents.pop(document_id, None) is not None:
                logger.info(f"删除文档 {document_id}")

    def load_records(self, records: Iterable[Document]) -> int:
        """载入已有文档记录（保留原ID，用于快照恢复）"""
        count = 0
        with self._lock:
            for record in records:
                self._documents[record.id] = record
                count += 1
        return count
