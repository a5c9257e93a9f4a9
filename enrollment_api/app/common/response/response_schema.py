"""响应格式标准化模块"""
from __future__ import annotations

from datetime import datetime
from typing import Any

from enrollment_api.app.utils.timezone import isoformat


def response_success(data: dict[str, Any] | None = None) -> dict[str, Any]:
    """成功响应"""
    return {"ok": True, **(data or {})}


def response_error(error: str, message: str) -> dict[str, Any]:
    """错误响应"""
    return {"ok": False, "error": error, "message": message}


def response_with_time(data: dict[str, Any] | None = None, now: datetime | None = None) -> dict[str, Any]:
    """带服务端时间的成功响应"""
    return response_success({"time": isoformat(now), **(data or {})})


# 导出
__all__ = [
    "response_success",
    "response_error",
    "response_with_time",
]
