"""时间工具

数据库统一存储不带时区的UTC时间。
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def isoformat(value: Optional[datetime] = None) -> str:
    """格式化为带Z后缀的ISO-8601字符串"""
    value = value or utcnow()
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value.isoformat(timespec="milliseconds") + "Z"
