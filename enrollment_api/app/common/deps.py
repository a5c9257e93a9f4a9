"""依赖项模块

运行期对象（存储、令牌校验器、维护日志）挂在 app.state 上，通过依赖注入传给路由。
"""
from __future__ import annotations

from typing import Optional
from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from enrollment_api.app.core.config import Settings
from enrollment_api.app.common.auth import Principal, TokenVerifier, verify_with_timeout
from enrollment_api.app.common.exception.errors import MissingCredentialsException, MissingTokenException
from enrollment_api.app.common.log import logger
from enrollment_api.app.enroll.crud import EnrollmentStore
from enrollment_api.app.enroll.service import EnrollmentService, MaintenanceLog, MaintenanceService

security = HTTPBearer(auto_error=False)


def get_settings(request: Request) -> Settings:
    """获取当前应用配置"""
    return request.app.state.settings


def get_token_verifier(request: Request) -> TokenVerifier:
    """获取令牌校验器，身份提供方未配置时返回500"""
    verifier: Optional[TokenVerifier] = getattr(request.app.state, "token_verifier", None)
    if verifier is None:
        raise MissingCredentialsException("token verifier is not configured")
    return verifier


async def get_current_principal(
    request: Request,
    verifier: TokenVerifier = Depends(get_token_verifier),
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    settings: Settings = Depends(get_settings)
) -> Principal:
    """获取当前认证主体"""
    if credentials is None or credentials.scheme.lower() != "bearer" or not credentials.credentials.strip():
        raise MissingTokenException()

    principal = await verify_with_timeout(verifier, credentials.credentials.strip(), settings.auth_timeout_seconds)
    logger.debug(f"令牌校验通过: principal={principal.id}, path={request.url.path}")
    return principal


def get_enrollment_store(request: Request) -> EnrollmentStore:
    return request.app.state.enrollment_store


def get_enrollment_service(
    store: EnrollmentStore = Depends(get_enrollment_store),
    settings: Settings = Depends(get_settings)
) -> EnrollmentService:
    """获取设备注册业务对象"""
    return EnrollmentService(store, settings)


def get_maintenance_log(request: Request) -> MaintenanceLog:
    return request.app.state.maintenance_log


def get_maintenance_service(
    request: Request,
    log: MaintenanceLog = Depends(get_maintenance_log),
    settings: Settings = Depends(get_settings)
) -> MaintenanceService:
    """获取维护命令业务对象"""
    return MaintenanceService(log, settings, started_at=request.app.state.started_at)
