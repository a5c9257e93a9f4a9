"""API路由模块"""
from __future__ import annotations

from fastapi import APIRouter
from .enroll import router as enroll_router
from .maintenance import router as maintenance_router
from .system import router as system_router

# 创建API路由
api_router = APIRouter()

# 注册子路由
api_router.include_router(system_router, tags=["系统"])
api_router.include_router(enroll_router, prefix="/enroll", tags=["设备注册"])
api_router.include_router(maintenance_router, prefix="/maintenance", tags=["维护"])

__all__ = ["api_router"]
