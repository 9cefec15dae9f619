"""活动数据结构定义

每个操作一个命令模型（在边界处完成校验），以及活动/件记录的读取模型
"""

from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime


class StartActivity(BaseModel):
    """开始活动命令"""
    operator_id: str
    process_id: str
    work_order_id: str
    planned_qty: int = Field(..., ge=1)
    device_id: Optional[str] = None
    machine_id: Optional[int] = None
    heads_in_use: Optional[List[int]] = None


class RegisterPiece(BaseModel):
    """逐件登记命令"""
    sequence: int = Field(..., ge=1)
    cumulative_elapsed_s: int = Field(..., ge=0)


class PauseActivity(BaseModel):
    """暂停命令"""
    reason: Optional[str] = None


class FinishActivity(BaseModel):
    """结束命令；realized_qty 省略时使用已登记件数"""
    realized_qty: Optional[int] = Field(None, ge=0)
    scrap_qty: int = Field(0, ge=0)
    scrap_reason: Optional[str] = None


class PauseRead(BaseModel):
    start: datetime
    end: Optional[datetime] = None
    reason: Optional[str] = None


class ActivityRead(BaseModel):
    """读取活动时的模型"""
    id: str
    operator_id: str
    process_id: str
    work_order_id: str
    machine_id: Optional[int] = None
    heads_in_use: Optional[List[int]] = None
    head_efficiency_pct: Optional[int] = None
    planned_qty: int
    realized_qty: Optional[int] = None
    scrap_qty: Optional[int] = None
    scrap_reason: Optional[str] = None
    status: str
    in_progress: bool
    pieces_done: int
    pauses: List[PauseRead] = []
    start_ts: datetime
    end_ts: Optional[datetime] = None
    total_elapsed_s: Optional[int] = None
    time_per_unit_s: Optional[float] = None
    origin_device: Optional[str] = None
    # 冗余显示字段
    operator_name: Optional[str] = None
    process_name: Optional[str] = None
    work_order_code: Optional[str] = None

    class Config:
        from_attributes = True


class PieceRegistration(BaseModel):
    """逐件登记结果"""
    piece_id: str
    sequence: int
    individual_s: int
    cumulative_elapsed_s: int
    pieces_done: int
    planned_qty: int


class PieceRead(BaseModel):
    """件记录（附带单件耗时与TPU）"""
    id: str
    activity_id: str
    sequence: int
    cumulative_elapsed_s: int
    completed_at: datetime
    individual_s: int
    tpu_minutes: float


class FinishMetrics(BaseModel):
    total_elapsed_seconds: int
    time_per_unit: Optional[float] = None
    pieces_registered: int
    status: str


class FinishResult(BaseModel):
    activity: ActivityRead
    metrics: FinishMetrics


class ActivityTpu(BaseModel):
    activity_id: str
    mode: str
    tpu_minutes: Optional[float] = None
    pieces_registered: int


class SessionSummary(BaseModel):
    """操作员活动排查汇总"""
    total: int
    in_progress: int
    active: int
    paused: int
    finished: int
    anomalous: int
    inconsistent: List[ActivityRead]
    activities: List[ActivityRead]
