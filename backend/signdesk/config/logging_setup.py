"""
日志配置 - 按 LoggingConfig 安装 signdesk 根日志器的处理器
"""

from __future__ import annotations

import logging
from pathlib import Path

from .runtime_config import LoggingConfig, RuntimeConfig

LOGGER_NAME = "signdesk"
LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(config: RuntimeConfig | LoggingConfig | None = None) -> logging.Logger:
    """
    配置日志（可重复调用，旧处理器会被替换）

    Args:
        config: 运行期配置或其中的日志段，缺省时使用全局配置

    Returns:
        signdesk 根日志器
    """
    if config is None:
        from .runtime_config import get_config
        config = get_config()

    storage_dir: Path | None = None
    if isinstance(config, RuntimeConfig):
        storage_dir = config.storage_dir
        config = config.logging

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(config.log_level.upper())

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(LOG_FORMAT)

    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(formatter)
    logger.addHandler(stream_handler)

    if config.log_to_file:
        log_path = Path(config.log_file)
        if storage_dir is not None and not log_path.is_absolute():
            log_path = storage_dir / log_path
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger
