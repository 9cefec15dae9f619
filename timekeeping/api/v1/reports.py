"""报表API路由"""

from datetime import datetime, timedelta
from typing import Optional
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from ... import schemas
from ...auth import require_role
from ...core import reports
from ...database.connection import get_db
from .activities import get_clock

router = APIRouter(prefix="/reports", tags=["reports"], dependencies=[Depends(require_role("admin", "manager"))])


@router.get("/work-orders/{work_order_id}/processes", response_model=schemas.WorkOrderReport)
def work_order_processes(work_order_id: str, db: Session = Depends(get_db)):
    """订单各工序平均单件时间"""
    return reports.work_order_report(db, work_order_id)


@router.get("/processes/{process_id}/tpu", response_model=schemas.ProcessTpuStats)
def process_tpu(
    process_id: str,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    db: Session = Depends(get_db),
    clock=Depends(get_clock),
):
    """工序TPU统计，默认最近7天"""
    end = end or clock()
    start = start or end - timedelta(days=7)
    return reports.process_tpu_stats(db, process_id, start, end)
