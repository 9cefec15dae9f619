"""操作员数据操作

定义对操作员数据的增删改查操作
"""

from sqlalchemy.orm import Session
from ..models import Operator
from ..schemas import OperatorCreate
from ..security import get_pin_hash, verify_pin


def get_operator(db: Session, operator_id: str):
    """根据ID获取操作员"""
    return db.get(Operator, operator_id)


def get_operator_by_registration(db: Session, registration: str):
    """根据工号获取操作员（工号统一大写）"""
    return db.query(Operator).filter(Operator.registration == registration.strip().upper()).first()


def create_operator(db: Session, operator: OperatorCreate):
    """创建操作员"""
    db_operator = Operator(
        registration=operator.registration,
        name=operator.name,
        email=operator.email,
        role=operator.role,
        pin_hash=get_pin_hash(operator.pin),
    )
    db.add(db_operator)
    db.commit()
    db.refresh(db_operator)
    return db_operator


def authenticate_operator(db: Session, registration: str, pin: str):
    """验证工号与PIN，失败返回 None"""
    operator = get_operator_by_registration(db, registration)
    if not operator or not verify_pin(pin, operator.pin_hash):
        return None
    return operator


def update_operator_pin(db: Session, operator_id: str, new_pin: str):
    """更新操作员PIN"""
    operator = get_operator(db, operator_id)
    if operator:
        operator.pin_hash = get_pin_hash(new_pin)
        db.commit()
        db.refresh(operator)
        return operator
    return None


def set_operator_active(db: Session, operator_id: str, active: bool):
    operator = get_operator(db, operator_id)
    if operator:
        operator.active = active
        db.commit()
        db.refresh(operator)
    return operator
