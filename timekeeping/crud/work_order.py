"""数据库操作（CRUD）- 生产订单相关

封装常用的数据库读写操作，便于路由层调用并保持业务逻辑集中。
订单编号唯一，重复时回滚并抛出 Conflict。
"""

from typing import Optional
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from .. import models, schemas
from ..core.errors import Conflict
from ..models.work_order import WORK_ORDER_OPEN

WORK_ORDER_CODE_TAKEN = "Work order code already exists"


def _commit_unique_code(db: Session, code: Optional[str]):
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise Conflict(WORK_ORDER_CODE_TAKEN, code=code) from exc


def create_work_order(db: Session, work_order: schemas.WorkOrderCreate):
    db_work_order = models.WorkOrder(
        code=work_order.code,
        quantity=work_order.quantity,
        reference=work_order.reference,
        description=work_order.description,
        status=WORK_ORDER_OPEN,
    )
    db.add(db_work_order)
    _commit_unique_code(db, work_order.code)
    db.refresh(db_work_order)
    return db_work_order


def get_work_order(db: Session, work_order_id: str):
    return db.get(models.WorkOrder, work_order_id)


def list_work_orders(db: Session, status: Optional[str] = None):
    """获取生产订单，按创建时间倒序，可按状态过滤"""
    query = db.query(models.WorkOrder)
    if status:
        query = query.filter(models.WorkOrder.status == status)
    return query.order_by(models.WorkOrder.created_at.desc()).all()


def count_work_orders_by_status(db: Session):
    """{status: count}"""
    rows = (
        db.query(models.WorkOrder.status, func.count(models.WorkOrder.id))
        .group_by(models.WorkOrder.status)
        .all()
    )
    return {status: count for status, count in rows}


def update_work_order(db: Session, work_order_id: str, work_order_update: schemas.WorkOrderUpdate):
    """更新生产订单"""
    db_work_order = get_work_order(db, work_order_id)
    if not db_work_order:
        return None

    update_data = work_order_update.model_dump(exclude_unset=True)
    for field, value in update_data.items():
        setattr(db_work_order, field, value)

    _commit_unique_code(db, update_data.get("code"))
    db.refresh(db_work_order)
    return db_work_order


def has_activities(db: Session, work_order_id: str) -> bool:
    return db.query(models.Activity.id).filter(models.Activity.work_order_id == work_order_id).first() is not None


def delete_work_order(db: Session, work_order_id: str):
    """删除指定ID的生产订单"""
    db_work_order = get_work_order(db, work_order_id)
    if db_work_order:
        db.delete(db_work_order)
        db.commit()
        return True
    return False
