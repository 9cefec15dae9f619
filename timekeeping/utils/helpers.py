"""工具函数模块

包含一些常用的格式化函数
"""

import math


def format_minutes_seconds(seconds: float) -> str:
    """将秒数格式化为 m:ss，例如 75.4 -> '1:15'"""
    if not seconds or seconds < 0:
        return "0:00"
    minutes = math.floor(seconds / 60)
    rest = math.floor(seconds % 60)
    return f"{minutes}:{rest:02d}"


def round1(value: float) -> float:
    """保留一位小数"""
    return round(value, 1)
