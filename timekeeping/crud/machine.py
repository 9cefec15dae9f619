"""机台数据操作

机台名称唯一，重复时回滚并抛出 Conflict。
"""

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from .. import models, schemas
from ..core.errors import Conflict


def create_machine(db: Session, machine: schemas.MachineCreate):
    """创建机台，并按机头数量生成机头记录"""
    db_machine = models.Machine(
        name=machine.name,
        kind=machine.kind,
        head_count=machine.head_count,
        status=machine.status,
    )
    db_machine.heads = [models.MachineHead(number=n) for n in range(1, machine.head_count + 1)]
    db.add(db_machine)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise Conflict("Machine name already exists", name=machine.name) from exc
    db.refresh(db_machine)
    return db_machine


def get_machine(db: Session, machine_id: int):
    return db.get(models.Machine, machine_id)


def list_machines(db: Session):
    return db.query(models.Machine).order_by(models.Machine.name).all()


def get_heads(db: Session, machine_id: int, numbers):
    return (
        db.query(models.MachineHead)
        .filter(models.MachineHead.machine_id == machine_id, models.MachineHead.number.in_(list(numbers)))
        .order_by(models.MachineHead.number)
        .all()
    )


def update_head(db: Session, machine_id: int, number: int, head_update: schemas.MachineHeadUpdate):
    """更新机头状态"""
    heads = get_heads(db, machine_id, [number])
    if not heads:
        return None
    head = heads[0]
    head.status = head_update.status
    if head_update.last_problem is not None:
        head.last_problem = head_update.last_problem
    db.commit()
    db.refresh(head)
    return head
