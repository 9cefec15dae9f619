"""活动生命周期引擎

负责活动状态机：开始 -> 暂停 <-> 继续 -> 结束，逐件登记，以及结束时的耗时与TPU计算。
- 所有校验在任何写入之前完成
- 每个操作只提交一次事务，结束操作中关闭暂停与最终写入属于同一事务
- 单人单会话、件序号不重复两条不变量由数据库唯一约束兜底，违反时转换为 Conflict
"""

import logging
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Callable, List, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from .. import crud, models, schemas
from ..config.settings import settings as default_settings
from ..models.activity import (
    OPEN_STATUSES,
    STATUS_ACTIVE,
    STATUS_ANOMALOUS,
    STATUS_FINISHED,
    STATUS_PAUSED,
)
from ..models.machine import HEAD_PROBLEM, MACHINE_ACTIVE, MACHINE_EMBROIDERY
from ..models.work_order import WORK_ORDER_IN_PROGRESS, WORK_ORDER_OPEN
from . import tpu
from .errors import Conflict, Forbidden, InvalidArgument, InvalidState, NotFound, StoreError

logger = logging.getLogger(__name__)

# 稳定的错误信息，HTTP 层可直接展示
OPERATOR_NOT_FOUND = "Operator not found"
OPERATOR_INACTIVE = "Operator is inactive"
SESSION_ALREADY_OPEN = "Operator already has an open activity; finish or pause it before starting a new one"
PROCESS_NOT_FOUND = "Process not found"
PROCESS_INACTIVE = "Process is inactive"
WORK_ORDER_NOT_FOUND = "Work order not found"
WORK_ORDER_UNAVAILABLE = "Work order is not available"
MACHINE_NOT_FOUND = "Machine not found"
MACHINE_UNAVAILABLE = "Machine is not available"
HEADS_WITHOUT_MACHINE = "Machine heads given without a machine"
HEADS_INVALID = "Invalid machine heads"
HEADS_WITH_PROBLEM = "Some selected machine heads have a problem"
ACTIVITY_NOT_FOUND = "Activity not found"
ACTIVITY_NOT_ACTIVE = "Activity is not active"
ACTIVITY_NOT_PAUSED = "Activity is not paused"
ACTIVITY_NOT_OPEN = "Activity cannot be finished from its current state"
PIECE_EXCEEDS_PLANNED = "Piece number exceeds planned quantity"
PIECE_ALREADY_REGISTERED = "Piece already registered"
REALIZED_REQUIRED = "Realized quantity is required when no pieces were registered"
REALIZED_EXCEEDS_PLANNED = "Realized quantity exceeds planned by too much"
SCRAP_REASON_REQUIRED = "Scrap reason is required when scrap quantity is positive"
STORE_UNAVAILABLE = "Data store error"


def utc_now() -> datetime:
    """当前UTC时间（naive，精确到秒）"""
    return datetime.now(timezone.utc).replace(tzinfo=None, microsecond=0)


def _iso(value: datetime) -> str:
    return value.isoformat()


def _close_open_pause(pauses: List[dict], now: datetime) -> bool:
    """关闭最近一条未结束的暂停，返回是否有暂停被关闭"""
    for pause in reversed(pauses):
        if pause.get("end") is None:
            pause["end"] = _iso(now)
            return True
    return False


class ActivityEngine:
    """活动状态机与TPU计算

    db: SQLAlchemy 会话
    clock: 返回当前时间的函数，测试中可替换
    """

    def __init__(
        self,
        db: Session,
        clock: Callable[[], datetime] = utc_now,
        anomaly_threshold_s: Optional[int] = None,
        max_realized_ratio: Optional[float] = None,
        log: Optional[logging.Logger] = None,
    ):
        self.db = db
        self.clock = clock
        self.anomaly_threshold_s = (
            anomaly_threshold_s if anomaly_threshold_s is not None else default_settings.ANOMALY_THRESHOLD_SECONDS
        )
        self.max_realized_ratio = (
            max_realized_ratio if max_realized_ratio is not None else default_settings.MAX_REALIZED_RATIO
        )
        self.log = log or logger

    @contextmanager
    def _store(self):
        """数据库异常统一转换为 StoreError"""
        try:
            yield
        except SQLAlchemyError as exc:
            self.db.rollback()
            self.log.exception("Data store failure")
            raise StoreError(STORE_UNAVAILABLE) from exc

    def _commit(self):
        with self._store():
            self.db.commit()

    def _get_activity(self, activity_id: str) -> models.Activity:
        with self._store():
            activity = crud.get_activity(self.db, activity_id)
        if not activity:
            raise NotFound(ACTIVITY_NOT_FOUND, activity_id=activity_id)
        return activity

    # ------------------------------------------------------------------
    # 开始
    # ------------------------------------------------------------------
    def start(self, command: schemas.StartActivity) -> models.Activity:
        """开始活动，并将生产订单置为 in_progress"""
        with self._store():
            operator = crud.get_operator(self.db, command.operator_id)
            if not operator:
                raise NotFound(OPERATOR_NOT_FOUND, operator_id=command.operator_id)
            if not operator.active:
                raise Forbidden(OPERATOR_INACTIVE, operator_id=command.operator_id)

            blocking = crud.get_open_activity(self.db, command.operator_id)
            if blocking:
                raise Conflict(SESSION_ALREADY_OPEN, active_activity_id=blocking.id)

            process = crud.get_process(self.db, command.process_id)
            if not process:
                raise NotFound(PROCESS_NOT_FOUND, process_id=command.process_id)
            if not process.active:
                raise Forbidden(PROCESS_INACTIVE, process_id=command.process_id)

            work_order = crud.get_work_order(self.db, command.work_order_id)
            if not work_order:
                raise NotFound(WORK_ORDER_NOT_FOUND, work_order_id=command.work_order_id)
            if work_order.status not in (WORK_ORDER_OPEN, WORK_ORDER_IN_PROGRESS):
                raise Conflict(WORK_ORDER_UNAVAILABLE, work_order_id=work_order.id, status=work_order.status)

            efficiency = self._check_machine(command)

            now = self.clock()
            activity = models.Activity(
                operator_id=operator.id,
                process_id=process.id,
                work_order_id=work_order.id,
                machine_id=command.machine_id,
                heads_in_use=list(command.heads_in_use) if command.heads_in_use else None,
                head_efficiency_pct=efficiency,
                planned_qty=command.planned_qty,
                status=STATUS_ACTIVE,
                in_progress=True,
                open_operator_id=operator.id,
                pieces_done=0,
                pauses=[],
                start_ts=now,
                origin_device=command.device_id or "unknown",
            )
            crud.add_activity(self.db, activity)
            work_order.status = WORK_ORDER_IN_PROGRESS

            try:
                self.db.commit()
            except IntegrityError as exc:
                # 并发开始时由唯一约束拦截；按约束列查找占用者，不一致的记录也能被报告
                self.db.rollback()
                blocking = crud.get_activity_holding_session(self.db, command.operator_id)
                raise Conflict(
                    SESSION_ALREADY_OPEN, active_activity_id=blocking.id if blocking else None
                ) from exc
            self.db.refresh(activity)

        self.log.info(
            "Activity %s started: operator=%s process=%s work_order=%s planned=%s",
            activity.id, operator.id, process.id, work_order.code, activity.planned_qty,
        )
        return activity

    def _check_machine(self, command: schemas.StartActivity) -> Optional[int]:
        """校验机台与机头，返回机头利用率（%）"""
        heads = command.heads_in_use or []
        if command.machine_id is None:
            if heads:
                raise InvalidArgument(HEADS_WITHOUT_MACHINE)
            return None

        machine = crud.get_machine(self.db, command.machine_id)
        if not machine:
            raise NotFound(MACHINE_NOT_FOUND, machine_id=command.machine_id)
        if machine.status != MACHINE_ACTIVE:
            raise Conflict(MACHINE_UNAVAILABLE, machine_id=machine.id, status=machine.status)

        if machine.kind != MACHINE_EMBROIDERY:
            return None

        invalid = [h for h in heads if h < 1 or h > machine.head_count]
        if not heads or invalid:
            raise InvalidArgument(HEADS_INVALID, invalid_heads=invalid, head_count=machine.head_count)

        problem_heads = [h for h in crud.get_heads(self.db, machine.id, heads) if h.status == HEAD_PROBLEM]
        if problem_heads:
            raise Conflict(
                HEADS_WITH_PROBLEM,
                heads_with_problem=[{"number": h.number, "last_problem": h.last_problem} for h in problem_heads],
            )
        return round(len(set(heads)) / machine.head_count * 100)

    # ------------------------------------------------------------------
    # 逐件登记
    # ------------------------------------------------------------------
    def register_piece(self, activity_id: str, command: schemas.RegisterPiece) -> schemas.PieceRegistration:
        """登记一件完成，返回该件的单件耗时"""
        activity = self._get_activity(activity_id)
        if activity.status != STATUS_ACTIVE or not activity.in_progress:
            raise InvalidState(ACTIVITY_NOT_ACTIVE, status=activity.status)
        if command.sequence > activity.planned_qty:
            raise InvalidArgument(PIECE_EXCEEDS_PLANNED, sequence=command.sequence, planned_qty=activity.planned_qty)

        with self._store():
            if crud.get_piece(self.db, activity.id, command.sequence):
                raise Conflict(PIECE_ALREADY_REGISTERED, sequence=command.sequence)

            try:
                # 会话未开启 autoflush，新件在 commit 时才写入，唯一约束冲突在 commit 处抛出
                piece = crud.add_piece(
                    self.db, activity.id, command.sequence, command.cumulative_elapsed_s, self.clock()
                )
                crud.increment_pieces_done(self.db, activity.id)
                self.db.commit()
            except IntegrityError as exc:
                self.db.rollback()
                raise Conflict(PIECE_ALREADY_REGISTERED, sequence=command.sequence) from exc
            self.db.refresh(activity)
            self.db.refresh(piece)

            previous = crud.get_piece(self.db, activity.id, command.sequence - 1) if command.sequence > 1 else None

        individual = tpu.individual_duration(
            command.cumulative_elapsed_s, previous.cumulative_elapsed_s if previous else None
        )
        if individual < 0:
            self.log.warning(
                "Negative individual time for activity %s piece %s: %ss", activity.id, command.sequence, individual
            )
        self.log.info(
            "Piece %s registered for activity %s (%s/%s)",
            command.sequence, activity.id, activity.pieces_done, activity.planned_qty,
        )
        return schemas.PieceRegistration(
            piece_id=piece.id,
            sequence=piece.sequence,
            individual_s=individual,
            cumulative_elapsed_s=piece.cumulative_elapsed_s,
            pieces_done=activity.pieces_done,
            planned_qty=activity.planned_qty,
        )

    # ------------------------------------------------------------------
    # 暂停 / 继续
    # ------------------------------------------------------------------
    def pause(self, activity_id: str, command: Optional[schemas.PauseActivity] = None) -> models.Activity:
        activity = self._get_activity(activity_id)
        if activity.status != STATUS_ACTIVE:
            raise InvalidState(ACTIVITY_NOT_ACTIVE, status=activity.status)

        reason = command.reason if command else None
        pauses = [dict(p) for p in (activity.pauses or [])]
        pauses.append({"start": _iso(self.clock()), "end": None, "reason": reason})
        activity.pauses = pauses
        activity.status = STATUS_PAUSED
        self._commit()
        self.db.refresh(activity)
        self.log.info("Activity %s paused (reason=%s)", activity.id, reason)
        return activity

    def resume(self, activity_id: str) -> models.Activity:
        activity = self._get_activity(activity_id)
        if activity.status != STATUS_PAUSED:
            raise InvalidState(ACTIVITY_NOT_PAUSED, status=activity.status)

        pauses = [dict(p) for p in (activity.pauses or [])]
        if not _close_open_pause(pauses, self.clock()):
            self.log.warning("Activity %s was paused without an open pause record", activity.id)
        activity.pauses = pauses
        activity.status = STATUS_ACTIVE
        self._commit()
        self.db.refresh(activity)
        self.log.info("Activity %s resumed", activity.id)
        return activity

    # ------------------------------------------------------------------
    # 结束
    # ------------------------------------------------------------------
    def finish(self, activity_id: str, command: schemas.FinishActivity):
        """结束活动，返回 (activity, FinishMetrics)"""
        activity = self._get_activity(activity_id)
        if activity.status not in OPEN_STATUSES:
            raise InvalidState(ACTIVITY_NOT_OPEN, status=activity.status)

        realized = command.realized_qty
        if realized is None:
            if activity.pieces_done > 0:
                realized = activity.pieces_done
            else:
                raise InvalidArgument(REALIZED_REQUIRED)

        max_allowed = tpu.max_realized_quantity(activity.planned_qty, self.max_realized_ratio)
        if realized > max_allowed:
            raise InvalidArgument(
                REALIZED_EXCEEDS_PLANNED,
                realized_qty=realized,
                planned_qty=activity.planned_qty,
                max_allowed=max_allowed,
            )

        scrap = command.scrap_qty or 0
        if scrap > 0 and not command.scrap_reason:
            raise InvalidArgument(SCRAP_REASON_REQUIRED)

        now = self.clock()
        pauses = [dict(p) for p in (activity.pauses or [])]
        if activity.status == STATUS_PAUSED:
            _close_open_pause(pauses, now)
        if any(p.get("end") is None for p in pauses):
            self.log.warning("Activity %s has unclosed pauses at finish; they are ignored", activity.id)

        total_elapsed = tpu.net_elapsed_seconds(activity.start_ts, now, pauses)
        time_per_unit = tpu.fallback_time_per_unit(total_elapsed, realized)
        status = tpu.classify_finish_status(total_elapsed, self.anomaly_threshold_s)
        if status == STATUS_ANOMALOUS:
            self.log.warning("Activity %s finished as anomalous: total elapsed %ss", activity.id, total_elapsed)

        activity.status = status
        activity.in_progress = False
        activity.open_operator_id = None
        activity.end_ts = now
        activity.realized_qty = realized
        activity.scrap_qty = scrap
        activity.scrap_reason = command.scrap_reason if scrap > 0 else None
        activity.total_elapsed_s = total_elapsed
        activity.time_per_unit_s = time_per_unit
        activity.pauses = pauses

        with self._store():
            work_order = crud.get_work_order(self.db, activity.work_order_id)
            if work_order:
                work_order.status = WORK_ORDER_OPEN
        self._commit()
        self.db.refresh(activity)

        self.log.info(
            "Activity %s finished: status=%s total=%ss tpu=%s realized=%s",
            activity.id, status, total_elapsed, time_per_unit, realized,
        )
        metrics = schemas.FinishMetrics(
            total_elapsed_seconds=total_elapsed,
            time_per_unit=round(time_per_unit, 2) if time_per_unit is not None else None,
            pieces_registered=activity.pieces_done,
            status=status,
        )
        return activity, metrics

    def force_close_all(self, operator_id: str) -> List[models.Activity]:
        """强制关闭操作员的全部未结束活动（管理员应急操作）"""
        with self._store():
            activities = crud.list_unclosed_activities(self.db, operator_id)
        if not activities:
            return []

        now = self.clock()
        for activity in activities:
            pauses = [dict(p) for p in (activity.pauses or [])]
            _close_open_pause(pauses, now)
            activity.pauses = pauses
            activity.status = STATUS_FINISHED
            activity.in_progress = False
            activity.open_operator_id = None
            activity.end_ts = now
            activity.realized_qty = activity.realized_qty or 0
            activity.total_elapsed_s = 0
        self._commit()
        for activity in activities:
            self.db.refresh(activity)

        self.log.warning(
            "Force-closed %s activities for operator %s: %s",
            len(activities), operator_id, [a.id for a in activities],
        )
        return activities

    # ------------------------------------------------------------------
    # 查询
    # ------------------------------------------------------------------
    def get_active(self, operator_id: str) -> Optional[models.Activity]:
        """操作员当前 active/paused 的活动，没有则返回 None"""
        with self._store():
            return crud.get_open_activity(self.db, operator_id)

    def list_pieces(self, activity_id: str) -> List[schemas.PieceRead]:
        """活动的逐件记录（按件序号），附带单件耗时与TPU分钟数"""
        activity = self._get_activity(activity_id)
        with self._store():
            pieces = crud.list_pieces(self.db, activity.id)
        durations = tpu.individual_durations([p.cumulative_elapsed_s for p in pieces])
        return [
            schemas.PieceRead(
                id=piece.id,
                activity_id=piece.activity_id,
                sequence=piece.sequence,
                cumulative_elapsed_s=piece.cumulative_elapsed_s,
                completed_at=piece.completed_at,
                individual_s=duration,
                tpu_minutes=round(duration / 60, 2),
            )
            for piece, duration in zip(pieces, durations)
        ]

    def activity_tpu(self, activity_id: str) -> schemas.ActivityTpu:
        """按是否存在逐件记录选择TPU计算方式"""
        activity = self._get_activity(activity_id)
        with self._store():
            pieces = crud.list_pieces(self.db, activity.id)
        mode, minutes = tpu.activity_tpu_minutes(
            activity.total_elapsed_s,
            activity.realized_qty,
            [p.cumulative_elapsed_s for p in pieces],
        )
        return schemas.ActivityTpu(
            activity_id=activity.id,
            mode=mode,
            tpu_minutes=round(minutes, 2) if minutes is not None else None,
            pieces_registered=len(pieces),
        )

    def session_summary(self, operator_id: str) -> schemas.SessionSummary:
        """操作员最近活动的排查汇总，列出状态与 in_progress 不一致的记录"""
        with self._store():
            activities = crud.list_recent_activities(self.db, operator_id)
        inconsistent = [a for a in activities if (a.status in OPEN_STATUSES) != bool(a.in_progress)]
        return schemas.SessionSummary(
            total=len(activities),
            in_progress=sum(1 for a in activities if a.in_progress),
            active=sum(1 for a in activities if a.status == STATUS_ACTIVE),
            paused=sum(1 for a in activities if a.status == STATUS_PAUSED),
            finished=sum(1 for a in activities if a.status == STATUS_FINISHED),
            anomalous=sum(1 for a in activities if a.status == STATUS_ANOMALOUS),
            inconsistent=[schemas.ActivityRead.model_validate(a) for a in inconsistent],
            activities=[schemas.ActivityRead.model_validate(a) for a in activities],
        )
