"""机台API路由"""

from typing import List
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from ... import crud, schemas
from ...auth import get_current_operator, require_role
from ...database.connection import get_db

router = APIRouter(prefix="/machines", tags=["machines"])


@router.get("/", response_model=List[schemas.MachineRead], dependencies=[Depends(get_current_operator)])
def list_machines(db: Session = Depends(get_db)):
    return crud.list_machines(db)


@router.get("/{machine_id}", response_model=schemas.MachineRead, dependencies=[Depends(get_current_operator)])
def get_machine(machine_id: int, db: Session = Depends(get_db)):
    machine = crud.get_machine(db, machine_id)
    if not machine:
        raise HTTPException(status_code=404, detail="Machine not found")
    return machine


@router.post("/", response_model=schemas.MachineRead, status_code=201,
             dependencies=[Depends(require_role("admin", "manager"))])
def create_machine(machine: schemas.MachineCreate, db: Session = Depends(get_db)):
    """创建机台（自动生成机头）"""
    return crud.create_machine(db, machine)


@router.put("/{machine_id}/heads/{number}", response_model=schemas.MachineHeadRead,
            dependencies=[Depends(get_current_operator)])
def update_head(machine_id: int, number: int, head_update: schemas.MachineHeadUpdate, db: Session = Depends(get_db)):
    """标记机头故障或恢复"""
    head = crud.update_head(db, machine_id, number, head_update)
    if not head:
        raise HTTPException(status_code=404, detail="Machine head not found")
    return head
