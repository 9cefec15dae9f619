"""机台数据结构定义"""

from pydantic import BaseModel, Field
from typing import List, Optional


class MachineHeadRead(BaseModel):
    number: int
    status: str
    last_problem: Optional[str] = None

    class Config:
        from_attributes = True


class MachineHeadUpdate(BaseModel):
    """机头状态更新"""
    status: str = Field(..., pattern="^(ok|problem)$")
    last_problem: Optional[str] = None


class MachineCreate(BaseModel):
    name: str
    kind: str = "standard"
    head_count: int = Field(1, ge=1)
    status: str = "active"


class MachineRead(MachineCreate):
    id: int
    heads: List[MachineHeadRead] = []

    class Config:
        from_attributes = True
