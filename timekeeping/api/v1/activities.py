"""活动API路由

开始/逐件登记/暂停/继续/结束，以及相关查询。业务规则在 core.lifecycle.ActivityEngine 中。
"""

from typing import List, Optional
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from ... import models, schemas
from ...auth import get_current_operator, require_role
from ...core.lifecycle import ActivityEngine, utc_now
from ...database.connection import get_db

router = APIRouter(prefix="/activities", tags=["activities"], dependencies=[Depends(get_current_operator)])


def get_clock():
    """时钟依赖，测试中可通过 dependency_overrides 替换"""
    return utc_now


def get_engine(db: Session = Depends(get_db), clock=Depends(get_clock)) -> ActivityEngine:
    return ActivityEngine(db, clock=clock)


@router.post("/start", response_model=schemas.ActivityRead, status_code=201)
def start_activity(command: schemas.StartActivity, engine: ActivityEngine = Depends(get_engine)):
    """开始活动"""
    return engine.start(command)


@router.post("/{activity_id}/pieces", response_model=schemas.PieceRegistration, status_code=201)
def register_piece(activity_id: str, command: schemas.RegisterPiece, engine: ActivityEngine = Depends(get_engine)):
    """登记一件完成"""
    return engine.register_piece(activity_id, command)


@router.get("/{activity_id}/pieces", response_model=List[schemas.PieceRead])
def list_pieces(activity_id: str, engine: ActivityEngine = Depends(get_engine)):
    """活动的逐件记录，按件序号排序"""
    return engine.list_pieces(activity_id)


@router.post("/{activity_id}/pause", response_model=schemas.ActivityRead)
def pause_activity(
    activity_id: str,
    command: Optional[schemas.PauseActivity] = None,
    engine: ActivityEngine = Depends(get_engine),
):
    return engine.pause(activity_id, command)


@router.post("/{activity_id}/resume", response_model=schemas.ActivityRead)
def resume_activity(activity_id: str, engine: ActivityEngine = Depends(get_engine)):
    return engine.resume(activity_id)


@router.post("/{activity_id}/finish", response_model=schemas.FinishResult)
def finish_activity(activity_id: str, command: schemas.FinishActivity, engine: ActivityEngine = Depends(get_engine)):
    """结束活动并返回耗时指标"""
    activity, metrics = engine.finish(activity_id, command)
    return schemas.FinishResult(activity=schemas.ActivityRead.model_validate(activity), metrics=metrics)


@router.get("/{activity_id}/tpu", response_model=schemas.ActivityTpu)
def activity_tpu(activity_id: str, engine: ActivityEngine = Depends(get_engine)):
    return engine.activity_tpu(activity_id)


@router.get("/active/{operator_id}", response_model=Optional[schemas.ActivityRead])
def active_activity(operator_id: str, engine: ActivityEngine = Depends(get_engine)):
    """操作员当前进行中的活动，没有则返回 null"""
    return engine.get_active(operator_id)


@router.post("/force-close-all/{operator_id}", response_model=List[schemas.ActivityRead])
def force_close_all(
    operator_id: str,
    engine: ActivityEngine = Depends(get_engine),
    _: models.Operator = Depends(require_role("admin", "manager")),
):
    """应急：强制关闭操作员的全部未结束活动"""
    return engine.force_close_all(operator_id)


@router.get("/sessions/{operator_id}", response_model=schemas.SessionSummary)
def session_summary(
    operator_id: str,
    engine: ActivityEngine = Depends(get_engine),
    _: models.Operator = Depends(require_role("admin", "manager")),
):
    """排查：操作员最近20条活动"""
    return engine.session_summary(operator_id)
