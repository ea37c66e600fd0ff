"""
按键加锁 - 串行化同一文档/签章配置上的"查找-再写入"序列

锁对象带引用计数：仍有线程持有或等待时 discard 只做标记，
最后一个使用者释放后才移除，保证同一个键在任何时刻只对应一把锁。
"""

from __future__ import annotations

import threading
from collections.abc import Iterator
from contextlib import contextmanager


class KeyedLocks:
    """key -> 可重入锁 的注册表"""

    def __init__(self):
        self._locks: dict[str, threading.RLock] = {}
        self._users: dict[str, int] = {}
        self._discarded: set[str] = set()
        self._guard = threading.Lock()

    @contextmanager
    def hold(self, key: str) -> Iterator[None]:
        """持有 key 对应的锁"""
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = threading.RLock()
                self._locks[key] = lock
            self._users[key] = self._users.get(key, 0) + 1

        try:
            with lock:
                yield
        finally:
            with self._guard:
                self._users[key] -= 1
                if self._users[key] == 0:
                    del self._users[key]
                    if key in self._discarded:
                        self._discarded.discard(key)
                        self._locks.pop(key, None)

    def discard(self, key: str) -> None:
        """键对应的记录删除后释放锁对象（仍被使用时延迟到最后一次释放）"""
        with self._guard:
            if key not in self._locks:
                return
            if self._users.get(key):
                self._discarded.add(key)
            else:
                self._locks.pop(key, None)

    def __len__(self) -> int:
        return len(self._locks)
