"""生产订单（OF）模型定义"""

from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.sql import func
from .base import Base, new_uuid

WORK_ORDER_OPEN = "open"
WORK_ORDER_IN_PROGRESS = "in_progress"
WORK_ORDER_COMPLETED = "completed"


class WorkOrder(Base):
    """生产订单模型"""
    __tablename__ = "work_orders"

    id = Column(String(36), primary_key=True, default=new_uuid)
    code = Column(String(64), nullable=False, unique=True, index=True)
    quantity = Column(Integer, nullable=False)
    reference = Column(String(255), nullable=True)
    description = Column(String(255), nullable=True)
    # open / in_progress / completed，由活动开始和结束时切换
    status = Column(String(16), nullable=False, default=WORK_ORDER_OPEN)
    created_at = Column(DateTime, server_default=func.now())
