"""生产订单API路由

定义生产订单（OF）相关的API端点
"""

from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from ... import crud, schemas
from ...auth import get_current_operator, require_role
from ...database.connection import get_db

router = APIRouter(prefix="/work-orders", tags=["work-orders"])

managers_only = [Depends(require_role("admin", "manager"))]


@router.get("/", response_model=List[schemas.WorkOrderRead], dependencies=[Depends(get_current_operator)])
def list_work_orders(status: Optional[str] = None, db: Session = Depends(get_db)):
    """获取生产订单列表"""
    return crud.list_work_orders(db, status=status)


@router.post("/", response_model=schemas.WorkOrderRead, status_code=201, dependencies=managers_only)
def create_work_order(work_order: schemas.WorkOrderCreate, db: Session = Depends(get_db)):
    """创建生产订单"""
    return crud.create_work_order(db, work_order)


@router.put("/{work_order_id}", response_model=schemas.WorkOrderRead, dependencies=managers_only)
def update_work_order(work_order_id: str, work_order_update: schemas.WorkOrderUpdate, db: Session = Depends(get_db)):
    """更新生产订单"""
    db_work_order = crud.update_work_order(db, work_order_id, work_order_update)
    if not db_work_order:
        raise HTTPException(status_code=404, detail="Work order not found")
    return db_work_order


@router.delete("/{work_order_id}", dependencies=managers_only)
def delete_work_order(work_order_id: str, db: Session = Depends(get_db)):
    """删除生产订单；存在关联活动时拒绝"""
    if not crud.get_work_order(db, work_order_id):
        raise HTTPException(status_code=404, detail="Work order not found")
    if crud.has_activities(db, work_order_id):
        raise HTTPException(status_code=409, detail="Work order has activities and cannot be deleted")
    crud.delete_work_order(db, work_order_id)
    return {"message": "Work order deleted"}
