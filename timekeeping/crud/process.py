"""工序数据操作

定义对工序数据的增删改查操作
"""

from sqlalchemy.orm import Session
from ..models import Process
from ..schemas import ProcessCreate


def create_process(db: Session, process: ProcessCreate):
    """创建工序"""
    db_process = Process(name=process.name, description=process.description)
    db.add(db_process)
    db.commit()
    db.refresh(db_process)
    return db_process


def get_process(db: Session, process_id: str):
    """根据ID获取工序"""
    return db.get(Process, process_id)


def get_process_by_name(db: Session, name: str):
    return db.query(Process).filter(Process.name == name).first()


def list_active_processes(db: Session):
    """获取启用的工序，按名称排序"""
    return db.query(Process).filter(Process.active.is_(True)).order_by(Process.name).all()
