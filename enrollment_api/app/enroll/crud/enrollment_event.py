"""注册事件CRUD操作"""
from __future__ import annotations

from typing import List
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from enrollment_api.app.enroll.model import EnrollmentEvent


class CRUDEnrollmentEvent:
    """注册事件CRUD操作类"""

    async def get_multi_by_owner(
        self,
        db: AsyncSession,
        owner_id: str,
        limit: int = 100
    ) -> List[EnrollmentEvent]:
        """获取账户下的注册事件"""
        result = await db.execute(
            select(EnrollmentEvent)
            .where(EnrollmentEvent.owner_id == owner_id)
            .order_by(EnrollmentEvent.id.desc())
            .limit(limit)
        )
        return result.scalars().all()

    async def create(self, db: AsyncSession, obj_in: dict) -> EnrollmentEvent:
        """创建注册事件"""
        db_obj = EnrollmentEvent(**obj_in)
        db.add(db_obj)
        await db.flush()
        return db_obj


# 创建实例
enrollment_event_crud = CRUDEnrollmentEvent()
