"""数据库模型模块

定义所有 SQLAlchemy ORM 模型
"""

from .base import Base
from .operator import Operator
from .process import Process
from .work_order import WorkOrder
from .machine import Machine, MachineHead
from .activity import Activity, PieceRecord

__all__ = ["Base", "Operator", "Process", "WorkOrder", "Machine", "MachineHead", "Activity", "PieceRecord"]
