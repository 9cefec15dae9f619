"""操作员数据结构定义

定义登录与操作员相关的Pydantic模型
"""

from pydantic import BaseModel, Field, field_validator
from typing import Optional


class OperatorBase(BaseModel):
    """操作员基础模型"""
    registration: str
    name: str
    email: Optional[str] = None
    role: str = "operator"

    @field_validator("registration")
    @classmethod
    def upper_registration(cls, value: str) -> str:
        return value.strip().upper()


class OperatorCreate(OperatorBase):
    """创建操作员时的模型"""
    pin: str = Field(..., pattern=r"^\d{6}$")


class OperatorRead(OperatorBase):
    """读取操作员时的模型"""
    id: str
    active: bool

    class Config:
        from_attributes = True


class OperatorLogin(BaseModel):
    """工号 + 6位PIN 登录"""
    registration: str
    pin: str = Field(..., min_length=6, max_length=6)


class ChangePin(BaseModel):
    """操作员修改自己的PIN"""
    current_pin: str = Field(..., min_length=6, max_length=6)
    new_pin: str = Field(..., pattern=r"^\d{6}$")


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"
    operator: OperatorRead
