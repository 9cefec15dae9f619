"""看板API路由

主管查看的汇总数据与实时进行中的活动。
"""

from typing import List
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from ... import schemas
from ...auth import require_role
from ...core import reports
from ...database.connection import get_db
from .activities import get_clock

router = APIRouter(prefix="/dashboard", tags=["dashboard"], dependencies=[Depends(require_role("admin", "manager"))])


@router.get("/stats", response_model=schemas.DashboardOverview)
def dashboard_stats(db: Session = Depends(get_db), clock=Depends(get_clock)):
    return reports.dashboard_overview(db, clock())


@router.get("/live", response_model=List[schemas.LiveActivity])
def live_activities(db: Session = Depends(get_db), clock=Depends(get_clock)):
    """进行中的活动，按开始时间排序"""
    return reports.live_activities(db, clock())
