"""报表数据结构定义"""

from pydantic import BaseModel
from typing import List, Optional
from datetime import datetime


class ProcessBreakdown(BaseModel):
    """订单下按工序汇总的单件时间"""
    process: str
    operators: str
    mean_seconds: float
    mean_formatted: str  # m:ss
    quantity: int


class WorkOrderReport(BaseModel):
    work_order_id: str
    code: str
    reference: Optional[str] = None
    description: Optional[str] = None
    processes: List[ProcessBreakdown]


class ProcessTpuStats(BaseModel):
    """工序TPU统计（分钟）"""
    process_id: str
    process: str
    start: datetime
    end: datetime
    tpu_mean: float
    tpu_std: float
    tpu_first: Optional[float] = None
    tpu_last: Optional[float] = None
    total_pieces: int
    total_activities: int
    operators: int
    total_minutes: int
