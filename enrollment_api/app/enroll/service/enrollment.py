"""设备注册业务逻辑

注册码状态：PENDING → CLAIMED 或 PENDING → EXPIRED，过期在认领时判定。
"""
from __future__ import annotations

import asyncio
from datetime import datetime, timedelta
from typing import Any, Awaitable, Callable, Optional, TypeVar
from sqlalchemy.exc import DBAPIError

from enrollment_api.app.core.config import Settings
from enrollment_api.app.common.auth import (
    Principal,
    generate_enrollment_code,
    enrollment_code_pattern,
    normalize_enrollment_code
)
from enrollment_api.app.common.exception.errors import (
    EmptyCodeException,
    InvalidOrExpiredCodeException,
    CodeSpaceExhaustedException,
    TransientErrorException
)
from enrollment_api.app.common.log import logger
from enrollment_api.app.enroll.crud import EnrollmentStore, EnrollmentConflict, ClaimOutcome
from enrollment_api.app.utils.timezone import utcnow

T = TypeVar("T")

DEVICE_ENROLLED_EVENT = "device.enrolled"


def _clip(value: Optional[str], max_length: int, default: str) -> str:
    value = (value or "").strip()
    return (value or default)[:max_length]


class EnrollmentService:
    """设备注册业务逻辑类"""

    def __init__(
        self,
        store: EnrollmentStore,
        settings: Settings,
        code_generator: Optional[Callable[[], str]] = None,
        clock: Callable[[], datetime] = utcnow
    ):
        self.store = store
        self.settings = settings
        self._generate = code_generator or (
            lambda: generate_enrollment_code(settings.enrollment_code_length)
        )
        self._clock = clock
        self._code_pattern = enrollment_code_pattern(settings.enrollment_code_length)

    @property
    def ttl(self) -> timedelta:
        return timedelta(minutes=self.settings.enrollment_ttl_minutes)

    async def _call_store(self, operation: Callable[[], Awaitable[T]], action: str) -> T:
        """带超时的存储调用，超时和连接错误视为暂时性错误"""
        try:
            return await asyncio.wait_for(operation(), timeout=self.settings.store_timeout_seconds)
        except asyncio.TimeoutError as e:
            raise TransientErrorException(f"{action}: 存储操作超时") from e
        except DBAPIError as e:
            raise TransientErrorException(f"{action}: {str(e)}") from e

    async def create_enrollment(self, principal: Principal) -> dict[str, Any]:
        """为账户创建注册码"""
        attempts = self.settings.enrollment_create_attempts
        for attempt in range(1, attempts + 1):
            code = self._generate()
            created_at = self._clock()
            expires_at = created_at + self.ttl
            try:
                record = await self._call_store(
                    lambda: self.store.create_pending(principal.id, code, expires_at, created_at),
                    "create_pending"
                )
            except EnrollmentConflict:
                logger.warning(f"注册码冲突，重新生成: 第{attempt}次, owner={principal.id}")
                continue

            logger.info(f"创建注册码成功: owner={principal.id}, 过期时间={record.expires_at.isoformat()}")
            return {
                "code": record.code,
                "expires_at": record.expires_at,
                "expires_in": int(self.ttl.total_seconds())
            }

        raise CodeSpaceExhaustedException(f"连续{attempts}次注册码冲突")

    async def claim_enrollment(
        self,
        code: Optional[str],
        device_name: Optional[str] = None,
        platform: Optional[str] = None
    ) -> dict[str, Any]:
        """设备使用注册码完成注册，无需认证"""
        normalized = normalize_enrollment_code(code)
        if not normalized:
            raise EmptyCodeException()
        if not self._code_pattern.match(normalized):
            raise InvalidOrExpiredCodeException(ClaimOutcome.NOT_FOUND)

        name = _clip(device_name, self.settings.device_name_max_length, self.settings.default_device_name)
        device_platform = _clip(platform, self.settings.platform_max_length, self.settings.default_platform)

        now = self._clock()
        result = await self._call_store(
            lambda: self.store.claim(normalized, now, name, device_platform),
            "claim"
        )
        if not result.ok:
            raise InvalidOrExpiredCodeException(result.outcome)

        device = result.device
        logger.info(f"设备注册成功: device_id={device.id}, owner={device.owner_id}, platform={device.platform}")

        await self._record_event(device.owner_id, device.id, {
            "name": device.name,
            "platform": device.platform
        })

        return {"device_id": device.id, "owner_id": device.owner_id}

    async def _record_event(self, owner_id: str, device_id: str, payload: dict[str, Any]) -> None:
        try:
            await asyncio.wait_for(
                self.store.append_event(owner_id, device_id, DEVICE_ENROLLED_EVENT, payload),
                timeout=self.settings.store_timeout_seconds
            )
        except asyncio.TimeoutError:
            logger.warning(f"注册事件写入超时: device_id={device_id}")
        except Exception as e:
            logger.warning(f"注册事件写入失败: device_id={device_id}, 错误: {str(e)}")
