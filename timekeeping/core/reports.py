"""TPU 报表与看板汇总

报表路径只统计有效的单件耗时：逐件模式下非正数的单件耗时视为数据不一致，
记录告警后剔除；没有逐件记录的历史活动按回退模式平均分摊净耗时。
"""

import logging
import math
from collections import OrderedDict
from datetime import datetime, timedelta
from typing import Dict, Iterable, List, Optional, Sequence

from sqlalchemy.orm import Session

from .. import crud, models, schemas
from ..config.settings import settings
from ..models.work_order import WORK_ORDER_COMPLETED, WORK_ORDER_IN_PROGRESS, WORK_ORDER_OPEN
from ..utils.helpers import format_minutes_seconds, round1
from . import tpu
from .errors import NotFound

logger = logging.getLogger(__name__)


def valid_durations(cumulative: Sequence[int], activity_id: Optional[str] = None) -> List[int]:
    """逐件耗时中剔除非正数"""
    result = []
    for index, duration in enumerate(tpu.individual_durations(cumulative), start=1):
        if duration > 0:
            result.append(duration)
        else:
            logger.warning("Ignoring invalid individual time %ss (activity %s, piece %s)", duration, activity_id, index)
    return result


def tpu_statistics(values: Sequence[float]) -> Dict[str, Optional[float]]:
    """TPU 序列的均值、总体标准差、首个与末个值（保留一位小数）"""
    if not values:
        return {"mean": 0.0, "std": 0.0, "first": None, "last": None}
    mean = sum(values) / len(values)
    std = 0.0
    if len(values) > 1:
        std = math.sqrt(sum((v - mean) ** 2 for v in values) / len(values))
    return {
        "mean": round1(mean),
        "std": round1(std),
        "first": round1(values[0]),
        "last": round1(values[-1]),
    }


def process_breakdown(
    activities: Iterable[models.Activity], slow_threshold_s: Optional[int] = None
) -> List[schemas.ProcessBreakdown]:
    """按工序汇总已结束活动的平均单件时间"""
    threshold = slow_threshold_s if slow_threshold_s is not None else settings.SLOW_PIECE_WARNING_SECONDS
    groups = OrderedDict()

    for activity in activities:
        name = activity.process_name or activity.process_id
        group = groups.setdefault(name, {"operators": set(), "seconds": 0.0, "quantity": 0})
        group["operators"].add(activity.operator_name or activity.operator_id)

        pieces = list(activity.pieces)
        if tpu.select_tpu_mode(pieces) == tpu.MODE_PER_PIECE:
            durations = valid_durations([p.cumulative_elapsed_s for p in pieces], activity.id)
            group["seconds"] += sum(durations)
            group["quantity"] += len(durations)
        else:
            quantity = activity.realized_qty if activity.realized_qty is not None else activity.pieces_done
            if quantity and quantity > 0:
                # 回退模式：净耗时均摊到每件
                group["seconds"] += activity.total_elapsed_s or 0
                group["quantity"] += quantity
                logger.info(
                    "Fallback TPU for activity %s: %ss / %s pieces", activity.id, activity.total_elapsed_s, quantity
                )

    result = []
    for name, group in groups.items():
        mean = group["seconds"] / group["quantity"] if group["quantity"] > 0 else 0.0
        if mean > threshold:
            logger.warning("Mean time per piece for %s is unusually high: %.2fs", name, mean)
        result.append(
            schemas.ProcessBreakdown(
                process=name,
                operators=", ".join(sorted(group["operators"])),
                mean_seconds=round(mean, 2),
                mean_formatted=format_minutes_seconds(mean),
                quantity=group["quantity"],
            )
        )
    return sorted(result, key=lambda item: item.process)


def work_order_report(db: Session, work_order_id: str) -> schemas.WorkOrderReport:
    """生产订单的工序时间报表"""
    work_order = crud.get_work_order(db, work_order_id)
    if not work_order:
        raise NotFound("Work order not found", work_order_id=work_order_id)
    activities = crud.list_closed_activities_for_work_order(db, work_order.id)
    return schemas.WorkOrderReport(
        work_order_id=work_order.id,
        code=work_order.code,
        reference=work_order.reference,
        description=work_order.description,
        processes=process_breakdown(activities),
    )


def process_tpu_stats(db: Session, process_id: str, start: datetime, end: datetime) -> schemas.ProcessTpuStats:
    """工序在时间窗口内的逐件TPU统计（分钟）"""
    process = crud.get_process(db, process_id)
    if not process:
        raise NotFound("Process not found", process_id=process_id)

    window_pieces = crud.list_pieces_for_process(db, process.id, start, end)
    activity_ids = list(OrderedDict.fromkeys(p.activity_id for p in window_pieces))

    durations_by_piece = {}
    operators = set()
    total_seconds = 0
    for activity_id in activity_ids:
        activity = crud.get_activity(db, activity_id)
        operators.add(activity.operator_id)
        total_seconds += activity.total_elapsed_s or 0
        pieces = crud.list_pieces(db, activity_id)
        durations = tpu.individual_durations([p.cumulative_elapsed_s for p in pieces])
        durations_by_piece.update({p.id: d for p, d in zip(pieces, durations)})

    tpu_minutes = [durations_by_piece[p.id] / 60 for p in window_pieces if durations_by_piece.get(p.id, 0) > 0]
    stats = tpu_statistics(tpu_minutes)

    return schemas.ProcessTpuStats(
        process_id=process.id,
        process=process.name,
        start=start,
        end=end,
        tpu_mean=stats["mean"],
        tpu_std=stats["std"],
        tpu_first=stats["first"],
        tpu_last=stats["last"],
        total_pieces=len(window_pieces),
        total_activities=len(activity_ids),
        operators=len(operators),
        total_minutes=round(total_seconds / 60),
    )


def _mean_minutes(seconds: Sequence[int]) -> int:
    if not seconds:
        return 0
    return round(sum(seconds) / len(seconds) / 60)


def live_activities(db: Session, now: datetime) -> List[schemas.LiveActivity]:
    """进行中的活动，净耗时计算到 now（未结束的暂停计到 now 为止）"""
    result = []
    for activity in crud.list_open_activities(db):
        pauses = [dict(p, end=p.get("end") or now.isoformat()) for p in (activity.pauses or [])]
        read = schemas.ActivityRead.model_validate(activity)
        result.append(
            schemas.LiveActivity(
                **read.model_dump(),
                elapsed_s=tpu.net_elapsed_seconds(activity.start_ts, now, pauses),
            )
        )
    return result


def dashboard_overview(db: Session, now: datetime) -> schemas.DashboardOverview:
    """看板：订单状态、当日活动、最近7天活跃操作员与各图表数据"""
    by_status = crud.count_work_orders_by_status(db)
    today = now.replace(hour=0, minute=0, second=0, microsecond=0)

    elapsed_by_process = {}
    for process_id, seconds in crud.closed_elapsed_by_process(db):
        elapsed_by_process.setdefault(process_id, []).append(seconds)
    all_elapsed = [s for values in elapsed_by_process.values() for s in values]

    stats = schemas.DashboardStats(
        total_work_orders=sum(by_status.values()),
        work_orders_open=by_status.get(WORK_ORDER_OPEN, 0),
        work_orders_in_progress=by_status.get(WORK_ORDER_IN_PROGRESS, 0),
        work_orders_completed=by_status.get(WORK_ORDER_COMPLETED, 0),
        total_activities=crud.count_activities(db),
        activities_today=crud.count_activities(db, start=today),
        active_operators=crud.count_operators_with_activity(db, now - timedelta(days=7)),
        mean_activity_minutes=_mean_minutes(all_elapsed),
    )

    per_day = []
    for offset in range(6, -1, -1):
        day = today - timedelta(days=offset)
        per_day.append(schemas.DayCount(
            day=day.strftime("%d/%m"),
            count=crud.count_activities(db, start=day, end=day + timedelta(days=1)),
        ))

    operators = []
    for operator_id, count in crud.count_closed_activities_by_operator(db).items():
        operator = crud.get_operator(db, operator_id)
        operators.append(schemas.OperatorProduction(name=operator.name if operator else operator_id, activities=count))
    operators.sort(key=lambda item: item.activities, reverse=True)

    process_times = [
        schemas.ProcessMeanTime(process=process.name, mean_minutes=_mean_minutes(elapsed_by_process.get(process.id, [])))
        for process in crud.list_active_processes(db)
    ]
    process_times.sort(key=lambda item: item.mean_minutes, reverse=True)

    return schemas.DashboardOverview(
        stats=stats,
        work_order_status=[
            schemas.StatusCount(status=status, count=by_status.get(status, 0))
            for status in (WORK_ORDER_OPEN, WORK_ORDER_IN_PROGRESS, WORK_ORDER_COMPLETED)
        ],
        activities_per_day=per_day,
        top_operators=operators[:5],
        process_times=process_times,
    )
