"""工序数据结构定义

定义工序相关的Pydantic模型
"""

from pydantic import BaseModel
from typing import Optional


class ProcessBase(BaseModel):
    """工序基础模型"""
    name: str
    description: Optional[str] = None


class ProcessCreate(ProcessBase):
    """创建工序时的模型"""
    pass


class ProcessRead(ProcessBase):
    """读取工序时的模型"""
    id: str
    active: bool

    class Config:
        from_attributes = True
