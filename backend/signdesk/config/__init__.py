"""
配置层 - 加载运行期配置与日志设置

职责：
- 加载 config/signdesk.yaml（运行期参数）
- 提供类型安全的配置访问接口
- 按配置安装日志处理器
"""

from .logging_setup import configure_logging
from .runtime_config import RuntimeConfig, get_config, reload_config

__all__ = [
    "RuntimeConfig",
    "get_config",
    "reload_config",
    "configure_logging",
]
