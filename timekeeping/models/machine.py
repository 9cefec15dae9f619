"""机台数据库模型

定义机台及刺绣机机头的数据模型
"""

from sqlalchemy import Column, Integer, String, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from .base import Base

MACHINE_EMBROIDERY = "embroidery"
MACHINE_ACTIVE = "active"
HEAD_OK = "ok"
HEAD_PROBLEM = "problem"


class Machine(Base):
    """机台表"""
    __tablename__ = "machines"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False, unique=True)  # 机台名称
    kind = Column(String(32), nullable=False, default="standard")  # standard / embroidery
    head_count = Column(Integer, nullable=False, default=1)  # 机头数量
    status = Column(String(16), nullable=False, default=MACHINE_ACTIVE)  # active / maintenance / inactive

    heads = relationship("MachineHead", back_populates="machine", order_by="MachineHead.number",
                         cascade="all, delete-orphan")


class MachineHead(Base):
    """机头表"""
    __tablename__ = "machine_heads"
    __table_args__ = (UniqueConstraint("machine_id", "number", name="uq_machine_head_number"),)

    id = Column(Integer, primary_key=True, index=True)
    machine_id = Column(Integer, ForeignKey("machines.id"), nullable=False)
    number = Column(Integer, nullable=False)  # 机头编号，从1开始
    status = Column(String(16), nullable=False, default=HEAD_OK)
    last_problem = Column(String(255), nullable=True)

    machine = relationship("Machine", back_populates="heads")
