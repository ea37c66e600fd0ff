"""
用户存储 - 身份记录的创建/查询/更新

维护两个唯一索引：邮箱 -> 用户ID，验证令牌 -> 用户ID
"""

from __future__ import annotations

import logging
import threading
import uuid
from collections.abc import Iterable
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from ..interfaces import DuplicateError, IUserStore, ValidationError
from ..models import User, UserCreate

logger = logging.getLogger(__name__)

# 字段名与线上别名都要拦截，别名在 model_validate 中优先生效
_IMMUTABLE_KEYS = {
    key
    for name in ("id", "created_at")
    for key in (name, User.model_fields[name].alias or name)
}


class UserStore(IUserStore):
    """内存用户存储"""

    def __init__(self):
        self._users: dict[str, User] = {}
        self._by_email: dict[str, str] = {}
        self._by_token: dict[str, str] = {}
        self._lock = threading.RLock()

    def create_user(
        self, data: UserCreate, verification_token: str | None = None
    ) -> User:
        """创建用户"""
        user = User(
            id=str(uuid.uuid4()),
            verification_token=verification_token,
            **data.model_dump(),
        )
        with self._lock:
            self._check_unique(user)
            self._store(user, previous=None)
        logger.info(f"创建用户 {user.id}: {user.email}")
        return user

    def get_user(self, user_id: str) -> User | None:
        return self._users.get(user_id)

    def get_user_by_email(self, email: str) -> User | None:
        user_id = self._by_email.get(email.strip().lower())
        return self._users.get(user_id) if user_id else None

    def get_user_by_verification_token(self, token: str) -> User | None:
        user_id = self._by_token.get(token)
        return self._users.get(user_id) if user_id else None

    def list_users(self) -> list[User]:
        with self._lock:
            return list(self._users.values())

    def update_user(self, user_id: str, **updates: Any) -> User | None:
        """部分更新用户，ID与创建时间不可修改"""
        with self._lock:
            existing = self._users.get(user_id)
            if existing is None:
                return None

            fields = {k: v for k, v in updates.items() if k not in _IMMUTABLE_KEYS}
            try:
                updated = User.model_validate({**existing.model_dump(), **fields})
            except PydanticValidationError as e:
                raise ValidationError(
                    "invalid user update", errors=e.errors(include_url=False)
                ) from e

            self._check_unique(updated)
            self._store(updated, previous=existing)

        logger.info(f"更新用户 {user_id}: {sorted(fields)}")
        return updated

    def load_records(self, records: Iterable[User]) -> int:
        """载入已有用户（保留原ID，用于快照恢复）"""
        count = 0
        with self._lock:
            for record in records:
                self._check_unique(record)
                self._store(record, previous=self._users.get(record.id))
                count += 1
        return count

    def _check_unique(self, user: User) -> None:
        owner = self._by_email.get(user.email)
        if owner is not None and owner != user.id:
            raise DuplicateError(f"email already registered: {user.email}")

        if user.verification_token:
            owner = self._by_token.get(user.verification_token)
            if owner is not None and owner != user.id:
                raise DuplicateError("verification token already in use")

    def _store(self, user: User, previous: User | None) -> None:
        if previous is not None:
            self._by_email.pop(previous.email, None)
            if previous.verification_token:
                self._by_token.pop(previous.verification_token, None)

        self._users[user.id] = user
        self._by_email[user.email] = user.id
        if user.verification_token:
            self._by_token[user.verification_token] = user.id
