"""设备注册Schema"""
from __future__ import annotations

from typing import Optional
from pydantic import BaseModel, Field


class EnrollmentCreateResponse(BaseModel):
    """创建注册码响应"""
    ok: bool = Field(True, description="是否成功")
    code: str = Field(..., description="注册码")
    expires_at: str = Field(..., description="过期时间（UTC ISO-8601）")
    expires_in: int = Field(..., description="有效期（秒）")
    enroll_url: str = Field(..., description="设备注册链接")


class EnrollmentClaimRequest(BaseModel):
    """认领注册码请求

    字段均可缺省，code 的校验和设备信息的截断由业务层处理。
    """
    code: Optional[str] = Field(None, description="注册码")
    device_name: Optional[str] = Field(None, description="设备名称")
    platform: Optional[str] = Field(None, description="平台")


class EnrollmentClaimResponse(BaseModel):
    """认领注册码响应"""
    ok: bool = Field(True, description="是否成功")
    device_id: str = Field(..., description="设备ID")
    owner_id: str = Field(..., description="所属账户ID")
