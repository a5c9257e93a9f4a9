"""系统接口Schema"""
from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class HealthResponse(BaseModel):
    """健康检查响应"""
    status: str = Field("ok", description="状态")
    time: str = Field(..., description="服务端时间")


class PublicConfigResponse(BaseModel):
    """公开配置响应，只包含身份提供方地址和匿名公钥"""
    model_config = ConfigDict(populate_by_name=True)

    supabase_url: str = Field(..., alias="SUPABASE_URL", description="身份提供方地址")
    supabase_anon_key: str = Field(..., alias="SUPABASE_ANON_KEY", description="匿名公钥")
