"""
运行期配置 - 读取 config/signdesk.yaml

职责：
- 加载存储路径/落位默认值/日志等运行参数
- 提供环境变量覆盖机制
- 类型安全的配置访问
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings

from ..models import DocumentStatus

DEFAULT_CONFIG_PATH = Path("config/signdesk.yaml")


class PlacementConfig(BaseModel):
    """落位配置"""

    default_bulk: bool = False


class DocumentsConfig(BaseModel):
    """文档配置"""

    default_status: DocumentStatus = DocumentStatus.PENDING


class LoggingConfig(BaseModel):
    """日志配置"""

    log_level: str = "INFO"
    log_to_file: bool = False
    log_file: str = "signdesk.log"


class RuntimeConfig(BaseSettings):
    """运行期配置（支持环境变量覆盖）"""

    # 基础路径
    base_dir: Path = Path(".")
    storage_dir: Path = Path("storage")
    snapshot_file: str = "snapshot.json"

    # 各子配置
    placement: PlacementConfig = Field(default_factory=PlacementConfig)
    documents: DocumentsConfig = Field(default_factory=DocumentsConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = {
        "env_prefix": "SIGNDESK_",
        "env_nested_delimiter": "__",
        "arbitrary_types_allowed": True,
    }

    @classmethod
    def from_yaml(cls, yaml_path: str | Path) -> RuntimeConfig:
        """从YAML文件加载配置"""
        path = Path(yaml_path)
        if not path.exists():
            return cls()

        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}

        runtime_opts = data.get("runtime_options", {})
        storage = cls._extract(runtime_opts, "storage")

        config = cls(
            placement=PlacementConfig(**cls._extract(runtime_opts, "placement")),
            documents=DocumentsConfig(**cls._extract(runtime_opts, "documents")),
            logging=LoggingConfig(**cls._extract(runtime_opts, "logging")),
            **storage,
        )

        config._resolve_paths(base_dir=path.parent)
        return config

    @staticmethod
    def _extract(data: dict[str, Any], key: str) -> dict[str, Any]:
        """提取并展平配置"""
        section = data.get(key, {})
        result = {}
        for k, v in section.items():
            if isinstance(v, dict) and "default" in v:
                result[k] = v["default"]
            elif not isinstance(v, dict):
                result[k] = v
        return result

    def _resolve_paths(self, base_dir: Path) -> None:
        """解析相对路径配置为绝对路径（基于配置文件所在目录）"""
        if not self.storage_dir.is_absolute():
            self.storage_dir = (base_dir / self.storage_dir).resolve()

    def get_snapshot_path(self) -> Path:
        """获取快照文件路径"""
        return self.storage_dir / self.snapshot_file

    def ensure_dirs(self) -> None:
        """确保必要目录存在"""
        self.storage_dir.mkdir(parents=True, exist_ok=True)


# 全局配置实例
_config: RuntimeConfig | None = None


def get_config() -> RuntimeConfig:
    """获取全局配置（惰性加载）"""
    global _config
    if _config is None:
        _config = RuntimeConfig.from_yaml(DEFAULT_CONFIG_PATH)
    return _config


def reload_config(yaml_path: str | Path | None = None) -> RuntimeConfig:
    """重新加载配置"""
    global _config
    path = yaml_path or DEFAULT_CONFIG_PATH
    _config = RuntimeConfig.from_yaml(path)
    return _config
