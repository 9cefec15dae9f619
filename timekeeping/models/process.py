"""工序数据库模型

定义工序相关的数据模型
"""

from sqlalchemy import Column, String, Boolean
from .base import Base, new_uuid


class Process(Base):
    """工序表"""
    __tablename__ = "processes"

    id = Column(String(36), primary_key=True, default=new_uuid)
    name = Column(String(255), nullable=False, unique=True)  # 工序名称
    description = Column(String(255), nullable=True)  # 描述
    active = Column(Boolean, nullable=False, default=True)
