"""FastAPI主应用入口

实现生产计时 RESTful API 服务
- 使用依赖注入管理数据库会话与时钟
- 集成 JWT 认证与角色检查
- 业务错误统一映射为 HTTP 状态码
"""

import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .api.v1 import (
    auth_router,
    activities_router,
    processes_router,
    work_orders_router,
    machines_router,
    reports_router,
    dashboard_router,
)
from .config.settings import settings
from .core.errors import (
    Conflict,
    Forbidden,
    InvalidArgument,
    InvalidState,
    NotFound,
    StoreError,
    TimekeepingError,
)
from .db import Base, engine, get_db

# Configure logging
logging.basicConfig(
    level=settings.LOG_LEVEL,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# 错误类型 -> HTTP状态码
STATUS_CODES = {
    NotFound: 404,
    Forbidden: 403,
    Conflict: 409,
    InvalidState: 409,
    InvalidArgument: 400,
    StoreError: 503,
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """启动时创建缺失的表"""
    Base.metadata.create_all(bind=engine)
    yield


# 创建FastAPI应用实例
app = FastAPI(
    title=settings.APP_TITLE,
    description=settings.APP_DESCRIPTION,
    version=settings.APP_VERSION,
    lifespan=lifespan,
)

# 挂载API路由
app.include_router(auth_router, prefix="/api/v1")
app.include_router(activities_router, prefix="/api/v1")
app.include_router(processes_router, prefix="/api/v1")
app.include_router(work_orders_router, prefix="/api/v1")
app.include_router(machines_router, prefix="/api/v1")
app.include_router(reports_router, prefix="/api/v1")
app.include_router(dashboard_router, prefix="/api/v1")


@app.exception_handler(TimekeepingError)
async def timekeeping_error_handler(request: Request, exc: TimekeepingError):
    status_code = STATUS_CODES.get(type(exc), 400)
    if status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    else:
        logger.info("%s %s rejected (%s): %s", request.method, request.url.path, exc.code, exc.message)
    return JSONResponse(
        status_code=status_code,
        content={"detail": exc.message, "error": exc.code, **exc.details},
    )


@app.get("/health")
def health():
    return {"status": "ok"}


@app.get("/health/db")
def health_check(db: Session = Depends(get_db)):
    """检查数据库连接状态"""
    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError:
        logger.exception("Database health check failed")
        raise HTTPException(status_code=503, detail="Database connection failed")
    return {"status": "healthy", "database": "reachable"}
