"""
快照 - 全部集合导出为JSON文件/从JSON文件读回

仅用于导出与迁移，不提供持久化保证
"""

from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path
from typing import Any

from pydantic import Field

from ..models import AppliedSignature, Document, SignatureProfile, User, WireModel

SNAPSHOT_VERSION = 1


class Snapshot(WireModel):
    """快照结构"""
    version: int = SNAPSHOT_VERSION
    created_at: datetime = Field(default_factory=datetime.now)
    users: list[User] = Field(default_factory=list)
    signatures: list[SignatureProfile] = Field(default_factory=list)
    documents: list[Document] = Field(default_factory=list)
    applied_signatures: list[AppliedSignature] = Field(default_factory=list)

    def dangling_placements(self) -> list[AppliedSignature]:
        """父记录（文档/签章配置）不在快照中的落位"""
        document_ids = {d.id for d in self.documents}
        signature_ids = {s.id for s in self.signatures}
        return [
            a for a in self.applied_signatures
            if a.document_id not in document_ids or a.signature_id not in signature_ids
        ]


def write_snapshot(data: dict[str, Any], path: Path) -> Path:
    """写入快照文件"""
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, ensure_ascii=False, indent=2, default=str)
    return path


def read_snapshot(path: Path) -> dict[str, Any]:
    """读取快照文件"""
    with open(path, encoding="utf-8") as f:
        return json.load(f)
