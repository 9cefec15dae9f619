from .auth import router as auth_router
from .activities import router as activities_router
from .processes import router as processes_router
from .work_orders import router as work_orders_router
from .machines import router as machines_router
from .reports import router as reports_router
from .dashboard import router as dashboard_router

__all__ = [
    "auth_router",
    "activities_router",
    "processes_router",
    "work_orders_router",
    "machines_router",
    "reports_router",
    "dashboard_router",
]
