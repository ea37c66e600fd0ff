"""
存储模块 - 内存集合与落位引擎

子模块：
- placements: 签章落位引擎（落位集合的唯一写入方）
- documents: 文档存储
- signatures: 签章配置存储
- users: 用户存储
- locks: 按文档/签章配置加锁
- snapshot: 快照导出/读回
"""

from .documents import DocumentStore
from .locks import KeyedLocks
from .placements import PlacementEngine
from .signatures import SignatureStore
from .snapshot import Snapshot, read_snapshot, write_snapshot
from .users import UserStore

__all__ = [
    "PlacementEngine",
    "DocumentStore",
    "SignatureStore",
    "UserStore",
    "KeyedLocks",
    "Snapshot",
    "read_snapshot",
    "write_snapshot",
]
