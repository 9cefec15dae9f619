"""模型公共部分

模型基类与通用的主键生成函数
"""

import uuid

from ..database.connection import Base


def new_uuid() -> str:
    """生成字符串形式的 UUID 主键"""
    return str(uuid.uuid4())


__all__ = ["Base", "new_uuid"]
