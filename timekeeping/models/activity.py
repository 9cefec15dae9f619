"""生产活动模型

一个操作员在一张生产订单上执行一道工序的计时记录，以及逐件完成记录。
"""

from sqlalchemy import (
    Column, Integer, String, Boolean, DateTime, Float, JSON, ForeignKey, UniqueConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from .base import Base, new_uuid

STATUS_ACTIVE = "active"
STATUS_PAUSED = "paused"
STATUS_FINISHED = "finished"
STATUS_ANOMALOUS = "anomalous"

OPEN_STATUSES = (STATUS_ACTIVE, STATUS_PAUSED)
TERMINAL_STATUSES = (STATUS_FINISHED, STATUS_ANOMALOUS)


class Activity(Base):
    """生产活动表"""
    __tablename__ = "activities"

    id = Column(String(36), primary_key=True, default=new_uuid)
    operator_id = Column(String(36), ForeignKey("operators.id"), nullable=False, index=True)
    process_id = Column(String(36), ForeignKey("processes.id"), nullable=False)
    work_order_id = Column(String(36), ForeignKey("work_orders.id"), nullable=False, index=True)
    machine_id = Column(Integer, ForeignKey("machines.id"), nullable=True)
    heads_in_use = Column(JSON, nullable=True)  # 使用中的机头编号列表
    head_efficiency_pct = Column(Integer, nullable=True)

    planned_qty = Column(Integer, nullable=False)
    realized_qty = Column(Integer, nullable=True)
    scrap_qty = Column(Integer, nullable=True)
    scrap_reason = Column(String(255), nullable=True)

    status = Column(String(16), nullable=False, default=STATUS_ACTIVE)
    in_progress = Column(Boolean, nullable=False, default=True)
    # 活动进行中时等于 operator_id，结束后置空；唯一约束保证每个操作员只有一个进行中的活动
    open_operator_id = Column(String(36), nullable=True, unique=True)
    pieces_done = Column(Integer, nullable=False, default=0)
    # [{"start": iso, "end": iso | None, "reason": str | None}, ...]
    pauses = Column(JSON, nullable=False, default=list)

    start_ts = Column(DateTime, nullable=False)
    end_ts = Column(DateTime, nullable=True)
    total_elapsed_s = Column(Integer, nullable=True)
    time_per_unit_s = Column(Float, nullable=True)
    origin_device = Column(String(64), nullable=True)
    created_at = Column(DateTime, server_default=func.now())

    operator = relationship("Operator")
    process = relationship("Process")
    work_order = relationship("WorkOrder")
    machine = relationship("Machine")
    pieces = relationship("PieceRecord", back_populates="activity", order_by="PieceRecord.sequence")

    @property
    def operator_name(self):
        return self.operator.name if self.operator else None

    @property
    def process_name(self):
        return self.process.name if self.process else None

    @property
    def work_order_code(self):
        return self.work_order.code if self.work_order else None


class PieceRecord(Base):
    """逐件完成记录表（不可修改）"""
    __tablename__ = "piece_records"
    __table_args__ = (UniqueConstraint("activity_id", "sequence", name="uq_piece_activity_sequence"),)

    id = Column(String(36), primary_key=True, default=new_uuid)
    activity_id = Column(String(36), ForeignKey("activities.id"), nullable=False, index=True)
    sequence = Column(Integer, nullable=False)  # 件序号，从1开始
    cumulative_elapsed_s = Column(Integer, nullable=False)  # 自活动开始起的累计秒数
    completed_at = Column(DateTime, nullable=False)

    activity = relationship("Activity", back_populates="pieces")
