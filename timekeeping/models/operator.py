"""操作员表模型

定义操作员（登录用户）相关的数据模型
"""

from sqlalchemy import Column, String, Boolean, DateTime
from sqlalchemy.sql import func
from .base import Base, new_uuid


class Operator(Base):
    """操作员表"""
    __tablename__ = "operators"

    id = Column(String(36), primary_key=True, default=new_uuid)
    registration = Column(String(32), unique=True, nullable=False, index=True)  # 工号（matricula），统一大写
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=True)
    pin_hash = Column(String(255), nullable=False)
    role = Column(String(16), nullable=False, default="operator")  # admin / manager / operator
    active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, server_default=func.now())
