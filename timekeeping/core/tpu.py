"""计时指标计算

纯函数：净耗时（扣除暂停）、逐件耗时、TPU（单件时间）的两种计算方式。
- 逐件模式：存在逐件记录时，用相邻累计时间之差求平均
- 回退模式：历史活动没有逐件记录时，用净耗时 / 实际数量
"""

import math
from datetime import datetime
from typing import Iterable, List, Optional, Sequence

from ..models.activity import STATUS_ANOMALOUS, STATUS_FINISHED

MODE_PER_PIECE = "per_piece"
MODE_FALLBACK = "fallback"


def as_datetime(value) -> Optional[datetime]:
    """将 ISO 字符串或 datetime 统一为 datetime"""
    if value is None or isinstance(value, datetime):
        return value
    return datetime.fromisoformat(value)


def seconds_between(start: datetime, end: datetime) -> int:
    """两个时间点之间的整秒数（向下取整）"""
    return math.floor((end - start).total_seconds())


def pause_seconds(pauses: Iterable[dict]) -> int:
    """已结束暂停的总秒数；未结束的暂停不计入"""
    total = 0
    for pause in pauses:
        start = as_datetime(pause.get("start"))
        end = as_datetime(pause.get("end"))
        if start and end:
            total += seconds_between(start, end)
    return total


def net_elapsed_seconds(start: datetime, end: datetime, pauses: Iterable[dict]) -> int:
    """净耗时 = (结束 - 开始) - 已结束暂停时长"""
    return seconds_between(start, end) - pause_seconds(pauses)


def classify_finish_status(total_elapsed: int, anomaly_threshold: int) -> str:
    """结束时的状态判定：负数或超过阈值视为异常"""
    if total_elapsed < 0 or total_elapsed > anomaly_threshold:
        return STATUS_ANOMALOUS
    return STATUS_FINISHED


def max_realized_quantity(planned_qty: int, ratio: float) -> int:
    return math.floor(planned_qty * ratio)


def individual_duration(cumulative: int, previous_cumulative: Optional[int]) -> int:
    """单件耗时；没有上一件时直接返回累计值"""
    if previous_cumulative is None:
        return cumulative
    return cumulative - previous_cumulative


def individual_durations(cumulative: Sequence[int]) -> List[int]:
    """累计耗时序列 -> 每件耗时序列，例如 [10, 25, 33] -> [10, 15, 8]"""
    durations = []
    previous = 0
    for value in cumulative:
        durations.append(value - previous)
        previous = value
    return durations


def per_piece_tpu_minutes(durations: Sequence[float]) -> Optional[float]:
    """逐件模式 TPU（分钟）：单件耗时的平均值 / 60"""
    if not durations:
        return None
    return sum(durations) / len(durations) / 60


def fallback_time_per_unit(total_elapsed: Optional[int], realized_qty: Optional[int]) -> Optional[float]:
    """回退模式 TPU（秒）：净耗时 / 实际数量，数量为0时返回 None"""
    if not realized_qty or total_elapsed is None:
        return None
    return total_elapsed / realized_qty


def select_tpu_mode(pieces: Sequence) -> str:
    """有逐件记录时使用逐件模式，否则回退"""
    return MODE_PER_PIECE if pieces else MODE_FALLBACK


def activity_tpu_minutes(total_elapsed: Optional[int], realized_qty: Optional[int], cumulative: Sequence[int]):
    """按活动数据选择计算方式，返回 (mode, tpu_minutes)"""
    mode = select_tpu_mode(cumulative)
    if mode == MODE_PER_PIECE:
        return mode, per_piece_tpu_minutes(individual_durations(cumulative))
    per_unit = fallback_time_per_unit(total_elapsed, realized_qty)
    return mode, (per_unit / 60 if per_unit is not None else None)
