"""
数据模型层 - 定义系统核心数据结构

所有模块通过这些模型交互，实现解耦：
- User: 身份记录
- SignatureProfile: 签章配置（图像 + 证书/私钥）
- Document: 上传的PDF元数据
- AppliedSignature: 签章在文档某页上的落位
"""

from .base import WireModel
from .document import Document, DocumentCreate, DocumentStatus, PageSize
from .placement import AppliedSignature, PlacementRequest, Position
from .signature import SignatureCreate, SignatureProfile
from .user import User, UserCreate

__all__ = [
    "WireModel",
    "User",
    "UserCreate",
    "SignatureProfile",
    "SignatureCreate",
    "Document",
    "DocumentCreate",
    "DocumentStatus",
    "PageSize",
    "AppliedSignature",
    "PlacementRequest",
    "Position",
]
