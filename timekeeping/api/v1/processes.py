"""工序API路由"""

from typing import List
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from ... import crud, schemas
from ...auth import get_current_operator, require_role
from ...database.connection import get_db

router = APIRouter(prefix="/processes", tags=["processes"])


@router.get("/", response_model=List[schemas.ProcessRead], dependencies=[Depends(get_current_operator)])
def list_processes(db: Session = Depends(get_db)):
    """获取启用的工序列表"""
    return crud.list_active_processes(db)


@router.post("/", response_model=schemas.ProcessRead, status_code=201,
             dependencies=[Depends(require_role("admin", "manager"))])
def create_process(process: schemas.ProcessCreate, db: Session = Depends(get_db)):
    """创建工序"""
    if crud.get_process_by_name(db, process.name):
        raise HTTPException(status_code=409, detail="Process already exists")
    return crud.create_process(db, process)
