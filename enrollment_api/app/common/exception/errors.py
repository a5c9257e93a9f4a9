"""错误定义模块"""
from __future__ import annotations

from typing import Any, Optional
from fastapi import HTTPException, status
from pydantic import BaseModel, Field


class ErrorCode:
    """错误码定义：(对外错误标识, 错误消息)"""
    # 通用错误
    INTERNAL_ERROR = ("InternalError", "Internal server error")
    INVALID_REQUEST = ("InvalidRequest", "Malformed request")

    # 认证相关错误
    MISSING_TOKEN = ("MissingToken", "Missing bearer token")
    INVALID_SESSION = ("InvalidSession", "Invalid or expired session")

    # 配置相关错误
    MISSING_CREDENTIALS = ("MissingCredentials", "Identity provider is not configured")

    # 注册码相关错误
    EMPTY_CODE = ("EmptyCode", "Enrollment code is required")
    INVALID_OR_EXPIRED_CODE = ("InvalidOrExpiredCode", "Enrollment code is invalid or expired")
    CODE_SPACE_EXHAUSTED = ("Exhausted", "Could not allocate an enrollment code")

    # 存储相关错误
    TRANSIENT_ERROR = ("TransientError", "Temporary failure, please retry")


class ErrorDetail(BaseModel):
    """错误响应模型"""
    ok: bool = Field(default=False, description="是否成功")
    error: str = Field(..., description="错误标识")
    message: str = Field(..., description="错误消息")


class BaseErrorException(HTTPException):
    """基础错误异常

    reason 只写入服务端日志，不会返回给调用方。
    """

    def __init__(
        self,
        error_code: tuple[str, str],
        status_code: int = status.HTTP_400_BAD_REQUEST,
        reason: Optional[Any] = None,
        headers: dict[str, str] | None = None
    ):
        self.error = error_code[0]
        self.error_message = error_code[1]
        self.reason = reason

        error_detail = ErrorDetail(error=self.error, message=self.error_message)

        super().__init__(
            status_code=status_code,
            detail=error_detail.model_dump(),
            headers=headers
        )


class MissingTokenException(BaseErrorException):
    """缺少令牌"""
    def __init__(self, reason: Any = None):
        super().__init__(
            ErrorCode.MISSING_TOKEN,
            status_code=status.HTTP_401_UNAUTHORIZED,
            reason=reason,
            headers={"WWW-Authenticate": "Bearer"}
        )


class InvalidSessionException(BaseErrorException):
    """令牌无效

    令牌格式错误、过期、吊销以及身份提供方不可达都归入此类。
    """
    def __init__(self, reason: Any = None):
        super().__init__(
            ErrorCode.INVALID_SESSION,
            status_code=status.HTTP_401_UNAUTHORIZED,
            reason=reason,
            headers={"WWW-Authenticate": "Bearer"}
        )


class MissingCredentialsException(BaseErrorException):
    """身份提供方未配置"""
    def __init__(self, reason: Any = None):
        super().__init__(
            ErrorCode.MISSING_CREDENTIALS,
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            reason=reason
        )


class EmptyCodeException(BaseErrorException):
    """注册码为空"""
    def __init__(self, reason: Any = None):
        super().__init__(
            ErrorCode.EMPTY_CODE,
            status_code=status.HTTP_400_BAD_REQUEST,
            reason=reason
        )


class InvalidOrExpiredCodeException(BaseErrorException):
    """注册码无效、已过期或已被使用

    对外不区分具体原因，reason 保存内部的认领结果。
    """
    def __init__(self, reason: Any = None):
        super().__init__(
            ErrorCode.INVALID_OR_EXPIRED_CODE,
            status_code=status.HTTP_400_BAD_REQUEST,
            reason=reason
        )


class CodeSpaceExhaustedException(BaseErrorException):
    """注册码分配失败"""
    def __init__(self, reason: Any = None):
        super().__init__(
            ErrorCode.CODE_SPACE_EXHAUSTED,
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            reason=reason
        )


class TransientErrorException(BaseErrorException):
    """存储暂时不可用，客户端可重试"""
    def __init__(self, reason: Any = None, retry_after: int = 1):
        super().__init__(
            ErrorCode.TRANSIENT_ERROR,
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            reason=reason,
            headers={"Retry-After": str(retry_after)}
        )
