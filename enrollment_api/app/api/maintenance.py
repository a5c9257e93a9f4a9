"""维护API路由"""
from __future__ import annotations

from typing import Optional
from fastapi import APIRouter, Body, Depends

from enrollment_api.app.common.auth import Principal
from enrollment_api.app.common.deps import get_current_principal, get_maintenance_service
from enrollment_api.app.common.response.response_schema import response_success, response_with_time
from enrollment_api.app.enroll.schema import MaintenanceRequest, MaintenanceResponse, MaintenanceLogsResponse
from enrollment_api.app.enroll.service import MaintenanceService


router = APIRouter()


@router.post("", summary="执行维护命令", response_model=MaintenanceResponse)
async def run_maintenance(
    payload: Optional[MaintenanceRequest] = Body(None),
    principal: Principal = Depends(get_current_principal),
    service: MaintenanceService = Depends(get_maintenance_service)
):
    """执行维护命令，命令为 logs 时返回维护日志"""
    command = payload.command if payload else None
    return response_success(service.run(principal, command))


@router.get("/logs", summary="查询维护日志", response_model=MaintenanceLogsResponse)
async def get_maintenance_logs(
    principal: Principal = Depends(get_current_principal),
    service: MaintenanceService = Depends(get_maintenance_service)
):
    """查询最近的维护日志，最新在前"""
    return response_with_time({"logs": service.list_logs()})
