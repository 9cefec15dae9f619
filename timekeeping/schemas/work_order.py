"""生产订单数据结构定义

定义生产订单（OF）相关的Pydantic模型
"""

from pydantic import BaseModel, Field, field_validator
from typing import Optional
from datetime import datetime


class WorkOrderBase(BaseModel):
    """生产订单基础模型"""
    code: str
    quantity: int = Field(..., ge=1)
    reference: Optional[str] = None
    description: Optional[str] = None


class WorkOrderCreate(WorkOrderBase):
    """创建生产订单时的模型"""
    pass


class WorkOrderUpdate(BaseModel):
    """更新生产订单时的模型；省略的字段保持不变"""
    code: Optional[str] = None
    quantity: Optional[int] = Field(None, ge=1)
    reference: Optional[str] = None
    description: Optional[str] = None

    @field_validator("code", "quantity")
    @classmethod
    def not_null(cls, value):
        # 编号和数量是必填列，只能省略不能置空
        if value is None:
            raise ValueError("must not be null")
        return value


class WorkOrderRead(WorkOrderBase):
    """读取生产订单时的模型"""
    id: str
    status: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
