"""数据库操作（CRUD）- 活动与逐件记录

只负责读写，不做状态校验；校验与提交由 core.lifecycle 中的 ActivityEngine 完成。
"""

from datetime import datetime
from typing import Optional
from sqlalchemy import distinct, func, or_
from sqlalchemy.orm import Session
from ..models import Activity, PieceRecord
from ..models.activity import OPEN_STATUSES, TERMINAL_STATUSES


def get_activity(db: Session, activity_id: str):
    return db.get(Activity, activity_id)


def get_open_activity(db: Session, operator_id: str):
    """操作员当前进行中的活动（active/paused 且 in_progress）"""
    return (
        db.query(Activity)
        .filter(
            Activity.operator_id == operator_id,
            Activity.status.in_(OPEN_STATUSES),
            Activity.in_progress.is_(True),
        )
        .order_by(Activity.start_ts.desc())
        .first()
    )


def get_activity_holding_session(db: Session, operator_id: str):
    """占用操作员会话唯一约束（open_operator_id）的活动"""
    return db.query(Activity).filter(Activity.open_operator_id == operator_id).first()


def list_unclosed_activities(db: Session, operator_id: str):
    """in_progress 为真或状态为 active/paused 的全部活动（包括不一致的记录）"""
    return (
        db.query(Activity)
        .filter(
            Activity.operator_id == operator_id,
            or_(Activity.in_progress.is_(True), Activity.status.in_(OPEN_STATUSES)),
        )
        .all()
    )


def list_recent_activities(db: Session, operator_id: str, limit: int = 20):
    return (
        db.query(Activity)
        .filter(Activity.operator_id == operator_id)
        .order_by(Activity.start_ts.desc())
        .limit(limit)
        .all()
    )


def list_closed_activities_for_work_order(db: Session, work_order_id: str):
    """订单下已结束（有结束时间）的活动"""
    return (
        db.query(Activity)
        .filter(Activity.work_order_id == work_order_id, Activity.end_ts.isnot(None))
        .all()
    )


def add_activity(db: Session, activity: Activity):
    db.add(activity)
    return activity


def get_piece(db: Session, activity_id: str, sequence: int):
    return (
        db.query(PieceRecord)
        .filter(PieceRecord.activity_id == activity_id, PieceRecord.sequence == sequence)
        .first()
    )


def list_pieces(db: Session, activity_id: str):
    """活动的逐件记录，按件序号排序"""
    return (
        db.query(PieceRecord)
        .filter(PieceRecord.activity_id == activity_id)
        .order_by(PieceRecord.sequence)
        .all()
    )


def count_pieces(db: Session, activity_id: str) -> int:
    return db.query(PieceRecord).filter(PieceRecord.activity_id == activity_id).count()


def add_piece(db: Session, activity_id: str, sequence: int, cumulative_elapsed_s: int, completed_at: datetime):
    piece = PieceRecord(
        activity_id=activity_id,
        sequence=sequence,
        cumulative_elapsed_s=cumulative_elapsed_s,
        completed_at=completed_at,
    )
    db.add(piece)
    return piece


def increment_pieces_done(db: Session, activity_id: str):
    """在数据库端自增已完成件数"""
    db.query(Activity).filter(Activity.id == activity_id).update(
        {Activity.pieces_done: Activity.pieces_done + 1}, synchronize_session=False
    )


def list_pieces_for_process(db: Session, process_id: str, start: datetime, end: Optional[datetime] = None):
    """工序在时间窗口内完成的逐件记录（按完成时间排序）"""
    query = (
        db.query(PieceRecord)
        .join(Activity, PieceRecord.activity_id == Activity.id)
        .filter(Activity.process_id == process_id, PieceRecord.completed_at >= start)
    )
    if end is not None:
        query = query.filter(PieceRecord.completed_at <= end)
    return query.order_by(PieceRecord.completed_at, PieceRecord.sequence).all()


def list_open_activities(db: Session):
    """全部进行中的活动（看板实时视图），按开始时间排序"""
    return (
        db.query(Activity)
        .filter(Activity.status.in_(OPEN_STATUSES), Activity.in_progress.is_(True))
        .order_by(Activity.start_ts)
        .all()
    )


def count_activities(db: Session, start: Optional[datetime] = None, end: Optional[datetime] = None) -> int:
    query = db.query(Activity)
    if start is not None:
        query = query.filter(Activity.start_ts >= start)
    if end is not None:
        query = query.filter(Activity.start_ts < end)
    return query.count()


def count_operators_with_activity(db: Session, since: datetime) -> int:
    return (
        db.query(func.count(distinct(Activity.operator_id)))
        .filter(Activity.start_ts >= since)
        .scalar()
    )


def closed_elapsed_by_process(db: Session):
    """已结束活动的 (process_id, 净耗时秒数) 列表"""
    return (
        db.query(Activity.process_id, Activity.total_elapsed_s)
        .filter(Activity.status.in_(TERMINAL_STATUSES), Activity.total_elapsed_s.isnot(None))
        .all()
    )


def count_closed_activities_by_operator(db: Session):
    """{operator_id: 已结束活动数}"""
    rows = (
        db.query(Activity.operator_id, func.count(Activity.id))
        .filter(Activity.status.in_(TERMINAL_STATUSES))
        .group_by(Activity.operator_id)
        .all()
    )
    return {operator_id: count for operator_id, count in rows}
