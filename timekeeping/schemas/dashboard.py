"""看板数据结构定义"""

from pydantic import BaseModel
from typing import List
from .activity import ActivityRead


class DashboardStats(BaseModel):
    """总体计数"""
    total_work_orders: int
    work_orders_open: int
    work_orders_in_progress: int
    work_orders_completed: int
    total_activities: int
    activities_today: int
    active_operators: int  # 最近7天有活动的操作员
    mean_activity_minutes: int


class StatusCount(BaseModel):
    status: str
    count: int


class DayCount(BaseModel):
    day: str  # dd/mm
    count: int


class OperatorProduction(BaseModel):
    name: str
    activities: int


class ProcessMeanTime(BaseModel):
    process: str
    mean_minutes: int


class DashboardOverview(BaseModel):
    stats: DashboardStats
    work_order_status: List[StatusCount]
    activities_per_day: List[DayCount]
    top_operators: List[OperatorProduction]
    process_times: List[ProcessMeanTime]


class LiveActivity(ActivityRead):
    """进行中的活动，附带截至当前的净耗时"""
    elapsed_s: int
