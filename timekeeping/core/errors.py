"""业务错误定义

活动引擎抛出的错误类型。每种错误有稳定的 code，HTTP 层据此映射状态码。
"""


class TimekeepingError(Exception):
    """所有业务错误的基类"""

    code = "error"

    def __init__(self, message: str, **details):
        super().__init__(message)
        self.message = message
        self.details = details


class NotFound(TimekeepingError):
    """引用的操作员/工序/订单/活动不存在"""
    code = "not_found"


class Forbidden(TimekeepingError):
    """引用的实体存在但已停用"""
    code = "forbidden"


class Conflict(TimekeepingError):
    """违反唯一性或可用性约束"""
    code = "conflict"


class InvalidState(TimekeepingError):
    """当前活动状态不允许该操作"""
    code = "invalid_state"


class InvalidArgument(TimekeepingError):
    """输入超出允许范围"""
    code = "invalid_argument"


class StoreError(TimekeepingError):
    """数据库访问失败"""
    code = "store_error"
