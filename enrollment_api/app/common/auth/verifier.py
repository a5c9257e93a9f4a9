"""令牌校验模块

通过外部身份提供方把 bearer 令牌换成已认证的主体。
"""
from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Optional, Protocol

import httpx

from enrollment_api.app.core.config import Settings
from enrollment_api.app.common.exception.errors import InvalidSessionException
from enrollment_api.app.common.log import logger


@dataclass(frozen=True)
class Principal:
    """已认证的账户主体"""
    id: str
    email: Optional[str] = None


class TokenVerifier(Protocol):
    """令牌校验接口

    任何失败都必须以 InvalidSessionException 抛出。
    """

    async def verify(self, token: str) -> Principal:
        ...


class SupabaseTokenVerifier:
    """基于 Supabase GoTrue `/auth/v1/user` 的令牌校验"""

    def __init__(
        self,
        base_url: str,
        anon_key: str,
        timeout: float = 5.0,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.base_url = base_url.rstrip("/")
        self.anon_key = anon_key
        self.timeout = timeout
        self._transport = transport

    async def verify(self, token: str) -> Principal:
        """校验令牌并返回主体"""
        try:
            async with httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self._transport,
            ) as client:
                response = await client.get(
                    "/auth/v1/user",
                    headers={
                        "apikey": self.anon_key,
                        "Authorization": f"Bearer {token}",
                    },
                )
        except httpx.HTTPError as exc:
            raise InvalidSessionException(f"身份提供方请求失败: {exc!r}") from exc

        if response.status_code != 200:
            raise InvalidSessionException(f"身份提供方拒绝令牌: HTTP {response.status_code}")

        try:
            body = response.json()
        except ValueError as exc:
            raise InvalidSessionException("身份提供方返回了非JSON响应") from exc

        user_id = body.get("id") if isinstance(body, dict) else None
        if not user_id:
            raise InvalidSessionException("身份提供方响应缺少用户ID")

        return Principal(id=str(user_id), email=body.get("email"))


async def verify_with_timeout(verifier: TokenVerifier, token: str, timeout: float) -> Principal:
    """带超时的令牌校验，超时视为会话无效"""
    try:
        return await asyncio.wait_for(verifier.verify(token), timeout=timeout)
    except asyncio.TimeoutError as exc:
        raise InvalidSessionException("令牌校验超时") from exc


def build_token_verifier(settings: Settings) -> Optional[TokenVerifier]:
    """根据配置创建令牌校验器，未配置身份提供方时返回 None"""
    if not settings.identity_provider_configured:
        logger.warning("身份提供方未配置，依赖认证的接口将返回500")
        return None
    return SupabaseTokenVerifier(
        base_url=settings.supabase_url,
        anon_key=settings.supabase_anon_key,
        timeout=settings.auth_timeout_seconds,
    )


__all__ = [
    "Principal",
    "TokenVerifier",
    "SupabaseTokenVerifier",
    "verify_with_timeout",
    "build_token_verifier",
]
