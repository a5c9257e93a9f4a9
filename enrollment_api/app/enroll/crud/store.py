"""注册存储

在事务内组合注册码、设备和事件的CRUD操作。认领的查询、校验和更新
在同一个事务里完成，并发认领同一注册码时只有一个能成功。
"""
from __future__ import annotations

import enum
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional, List
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from enrollment_api.app.common.log import logger
from enrollment_api.app.enroll.model import EnrollmentCode, Device, EnrollmentEvent
from enrollment_api.app.enroll.crud.enrollment_code import enrollment_code_crud
from enrollment_api.app.enroll.crud.device import device_crud
from enrollment_api.app.enroll.crud.enrollment_event import enrollment_event_crud
from enrollment_api.app.utils.timezone import utcnow


class EnrollmentConflict(Exception):
    """注册码与已有记录冲突"""

    def __init__(self, code: str):
        super().__init__(f"enrollment code collision: {code}")
        self.code = code


class ClaimOutcome(str, enum.Enum):
    """认领结果"""
    CLAIMED = "claimed"
    NOT_FOUND = "not_found"
    ALREADY_CLAIMED = "already_claimed"
    EXPIRED = "expired"


@dataclass
class ClaimResult:
    outcome: ClaimOutcome
    device: Optional[Device] = None

    @property
    def ok(self) -> bool:
        return self.outcome is ClaimOutcome.CLAIMED

    @property
    def owner_id(self) -> Optional[str]:
        return self.device.owner_id if self.device else None


def classify_claim(record: Optional[EnrollmentCode], now: datetime) -> Optional[ClaimOutcome]:
    """判断记录能否被认领，可以认领时返回 None"""
    if record is None:
        return ClaimOutcome.NOT_FOUND
    if record.claimed_at is not None:
        return ClaimOutcome.ALREADY_CLAIMED
    if now > record.expires_at:
        return ClaimOutcome.EXPIRED
    return None


class EnrollmentStore:
    """注册存储"""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def create_pending(
        self,
        owner_id: str,
        code: str,
        expires_at: datetime,
        created_at: Optional[datetime] = None
    ) -> EnrollmentCode:
        """写入待认领的注册码，注册码冲突时抛出 EnrollmentConflict"""
        async with self._session_factory() as db:
            try:
                async with db.begin():
                    record = await enrollment_code_crud.create(db, {
                        "owner_id": owner_id,
                        "code": code,
                        "created_at": created_at or utcnow(),
                        "expires_at": expires_at
                    })
            except IntegrityError as e:
                raise EnrollmentConflict(code) from e
        return record

    async def claim(
        self,
        code: str,
        now: datetime,
        device_name: str,
        platform: str
    ) -> ClaimResult:
        """原子认领注册码并创建设备"""
        async with self._session_factory() as db:
            async with db.begin():
                record = await enrollment_code_crud.get_by_code(db, code, for_update=True)
                outcome = classify_claim(record, now)
                if outcome is not None:
                    return ClaimResult(outcome)

                device_id = str(uuid.uuid4())
                if not await enrollment_code_crud.mark_claimed(db, record.id, device_id, now):
                    # 条件更新失败：其他请求已先行认领或记录刚好过期
                    await db.refresh(record)
                    return ClaimResult(classify_claim(record, now) or ClaimOutcome.ALREADY_CLAIMED)

                device = await device_crud.create(db, {
                    "id": device_id,
                    "owner_id": record.owner_id,
                    "name": device_name,
                    "platform": platform,
                    "created_at": now
                })

        return ClaimResult(ClaimOutcome.CLAIMED, device=device)

    async def append_event(
        self,
        owner_id: str,
        device_id: Optional[str],
        type: str,
        payload: Optional[dict[str, Any]] = None
    ) -> None:
        """追加审计事件，失败只记录日志"""
        try:
            async with self._session_factory() as db:
                async with db.begin():
                    await enrollment_event_crud.create(db, {
                        "owner_id": owner_id,
                        "device_id": device_id,
                        "type": type,
                        "payload": payload
                    })
        except Exception as e:
            logger.warning(f"注册事件写入失败: type={type}, device_id={device_id}, 错误: {str(e)}")

    async def get_by_code(self, code: str) -> Optional[EnrollmentCode]:
        """按注册码查询记录"""
        async with self._session_factory() as db:
            return await enrollment_code_crud.get_by_code(db, code)

    async def count_devices(self, owner_id: Optional[str] = None) -> int:
        """统计设备数量"""
        async with self._session_factory() as db:
            return await device_crud.count(db, owner_id)

    async def list_events(self, owner_id: str) -> List[EnrollmentEvent]:
        """查询账户的注册事件"""
        async with self._session_factory() as db:
            return await enrollment_event_crud.get_multi_by_owner(db, owner_id)
