"""API数据模型模块

定义所有 Pydantic 模型（请求/响应结构体）
"""

from .operator import OperatorCreate, OperatorRead, OperatorLogin, ChangePin, Token
from .process import ProcessCreate, ProcessRead
from .work_order import WorkOrderCreate, WorkOrderUpdate, WorkOrderRead
from .machine import MachineCreate, MachineRead, MachineHeadRead, MachineHeadUpdate
from .activity import (
    StartActivity,
    RegisterPiece,
    PauseActivity,
    FinishActivity,
    PauseRead,
    ActivityRead,
    PieceRegistration,
    PieceRead,
    FinishMetrics,
    FinishResult,
    ActivityTpu,
    SessionSummary,
)
from .report import ProcessBreakdown, WorkOrderReport, ProcessTpuStats
from .dashboard import (
    DashboardStats,
    StatusCount,
    DayCount,
    OperatorProduction,
    ProcessMeanTime,
    DashboardOverview,
    LiveActivity,
)

__all__ = [
    "OperatorCreate",
    "OperatorRead",
    "OperatorLogin",
    "ChangePin",
    "Token",
    "ProcessCreate",
    "ProcessRead",
    "WorkOrderCreate",
    "WorkOrderUpdate",
    "WorkOrderRead",
    "MachineCreate",
    "MachineRead",
    "MachineHeadRead",
    "MachineHeadUpdate",
    "StartActivity",
    "RegisterPiece",
    "PauseActivity",
    "FinishActivity",
    "PauseRead",
    "ActivityRead",
    "PieceRegistration",
    "PieceRead",
    "FinishMetrics",
    "FinishResult",
    "ActivityTpu",
    "SessionSummary",
    "ProcessBreakdown",
    "WorkOrderReport",
    "ProcessTpuStats",
    "DashboardStats",
    "StatusCount",
    "DayCount",
    "OperatorProduction",
    "ProcessMeanTime",
    "DashboardOverview",
    "LiveActivity",
]
