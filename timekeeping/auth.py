"""认证模块

该模块处理JWT令牌生成与校验，并提供 FastAPI 依赖：当前操作员与角色检查。
"""

from datetime import datetime, timedelta, timezone
from typing import Optional
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from sqlalchemy.orm import Session
from . import crud, models
from .config.settings import settings
from .database.connection import get_db

# 使用全局配置
SECRET_KEY = settings.SECRET_KEY
ALGORITHM = settings.ALGORITHM
ACCESS_TOKEN_EXPIRE_MINUTES = settings.ACCESS_TOKEN_EXPIRE_MINUTES

bearer_scheme = HTTPBearer(auto_error=False)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None):
    """创建JWT访问令牌"""
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


def token_for_operator(operator: models.Operator) -> str:
    return create_access_token({"sub": operator.id, "registration": operator.registration, "role": operator.role})


def verify_token(token: str):
    """验证JWT令牌，返回操作员ID"""
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError:
        return None
    return payload.get("sub")


def get_current_operator(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> models.Operator:
    """从 Bearer 令牌解析当前操作员"""
    if credentials is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Token not provided")
    operator_id = verify_token(credentials.credentials)
    if operator_id is None:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Invalid or expired token")
    operator = crud.get_operator(db, operator_id)
    if operator is None or not operator.active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Invalid or expired token")
    return operator


def require_role(*roles: str):
    """角色检查依赖，例如 Depends(require_role("admin", "manager"))"""

    def checker(operator: models.Operator = Depends(get_current_operator)) -> models.Operator:
        if operator.role not in roles:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Insufficient permissions")
        return operator

    return checker
