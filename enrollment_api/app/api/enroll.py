"""设备注册API路由"""
from __future__ import annotations

from typing import Optional
from fastapi import APIRouter, Body, Depends, Request

from enrollment_api.app.core.config import Settings
from enrollment_api.app.common.auth import Principal
from enrollment_api.app.common.deps import get_current_principal, get_enrollment_service, get_settings
from enrollment_api.app.common.log import logger
from enrollment_api.app.common.response.response_schema import response_success
from enrollment_api.app.enroll.schema import (
    EnrollmentCreateResponse,
    EnrollmentClaimRequest,
    EnrollmentClaimResponse
)
from enrollment_api.app.enroll.service import EnrollmentService
from enrollment_api.app.utils.timezone import isoformat


router = APIRouter()


def build_enroll_url(request: Request, settings: Settings, code: str) -> str:
    """生成设备注册链接"""
    base_url = settings.public_base_url or str(request.base_url)
    return f"{base_url.rstrip('/')}/enroll?code={code}"


@router.post("/create", summary="创建注册码", response_model=EnrollmentCreateResponse)
async def create_enrollment(
    request: Request,
    principal: Principal = Depends(get_current_principal),
    service: EnrollmentService = Depends(get_enrollment_service),
    settings: Settings = Depends(get_settings)
):
    """为当前账户创建一次性注册码"""
    logger.info(f"创建注册码请求: owner={principal.id}")

    enrollment = await service.create_enrollment(principal)

    return response_success({
        "code": enrollment["code"],
        "expires_at": isoformat(enrollment["expires_at"]),
        "expires_in": enrollment["expires_in"],
        "enroll_url": build_enroll_url(request, settings, enrollment["code"])
    })


@router.post("/claim", summary="认领注册码", response_model=EnrollmentClaimResponse)
async def claim_enrollment(
    request: Request,
    payload: Optional[EnrollmentClaimRequest] = Body(None),
    service: EnrollmentService = Depends(get_enrollment_service)
):
    """设备使用注册码完成注册"""
    payload = payload or EnrollmentClaimRequest()
    client_host = request.client.host if request.client else None
    logger.info(f"认领注册码请求: ip={client_host}, platform={payload.platform}")

    result = await service.claim_enrollment(
        payload.code,
        device_name=payload.device_name,
        platform=payload.platform
    )

    return response_success(result)
