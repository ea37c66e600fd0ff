"""
SignDesk 签章落位系统 - 后端核心模块

模块结构：
- config/     运行期配置与日志
- models/     数据模型定义（用户/签章/文档/落位）
- storage/    存储层（用户库/签章库/文档库/落位引擎/快照）
- service.py  边界服务（引用校验 + 按文档加锁）
"""

__version__ = "0.1.0"
