"""系统API路由"""
from __future__ import annotations

from fastapi import APIRouter, Depends

from enrollment_api.app.core.config import Settings
from enrollment_api.app.common.deps import get_settings
from enrollment_api.app.common.exception.errors import MissingCredentialsException
from enrollment_api.app.enroll.schema import HealthResponse, PublicConfigResponse
from enrollment_api.app.utils.timezone import isoformat


router = APIRouter()


@router.get("/health", summary="健康检查", response_model=HealthResponse)
async def health_check():
    """健康检查"""
    return {"status": "ok", "time": isoformat()}


@router.get("/config", summary="公开配置", response_model=PublicConfigResponse)
async def public_config(settings: Settings = Depends(get_settings)):
    """返回前端所需的身份提供方地址和匿名公钥"""
    if not settings.identity_provider_configured:
        raise MissingCredentialsException("SUPABASE_URL or SUPABASE_ANON_KEY is not set")
    return {
        "SUPABASE_URL": settings.supabase_url,
        "SUPABASE_ANON_KEY": settings.supabase_anon_key
    }
