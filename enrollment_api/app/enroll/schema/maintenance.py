"""维护命令Schema"""
from __future__ import annotations

from typing import Any, Optional, List
from pydantic import BaseModel, Field


class MaintenanceRequest(BaseModel):
    """维护命令请求"""
    command: Optional[str] = Field(None, description="命令，缺省为 status")


class MaintenanceResponse(BaseModel):
    """维护命令响应"""
    ok: bool = Field(True, description="是否成功")
    time: str = Field(..., description="执行时间")
    command: str = Field(..., description="规范化后的命令")
    result: Any = Field(None, description="命令结果")


class MaintenanceLogEntryResponse(BaseModel):
    """维护日志条目"""
    time: str = Field(..., description="记录时间")
    actor: str = Field(..., description="执行者")
    command: str = Field(..., description="命令")
    result_preview: str = Field(..., description="结果摘要")


class MaintenanceLogsResponse(BaseModel):
    """维护日志列表响应"""
    ok: bool = Field(True, description="是否成功")
    time: str = Field(..., description="查询时间")
    logs: List[MaintenanceLogEntryResponse] = Field(..., description="维护日志，最新在前")
