"""注册码CRUD操作"""
from __future__ import annotations

from typing import Optional
from datetime import datetime
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, and_
from enrollment_api.app.enroll.model import EnrollmentCode


class CRUDEnrollmentCode:
    """注册码CRUD操作类"""

    async def get_by_code(
        self,
        db: AsyncSession,
        code: str,
        for_update: bool = False
    ) -> Optional[EnrollmentCode]:
        """根据注册码获取记录，for_update 时在支持的数据库上加行锁"""
        query = select(EnrollmentCode).where(EnrollmentCode.code == code)
        if for_update:
            query = query.with_for_update()
        result = await db.execute(query)
        return result.scalar_one_or_none()

    async def create(self, db: AsyncSession, obj_in: dict) -> EnrollmentCode:
        """创建注册码记录"""
        db_obj = EnrollmentCode(**obj_in)
        db.add(db_obj)
        await db.flush()
        await db.refresh(db_obj)
        return db_obj

    async def mark_claimed(
        self,
        db: AsyncSession,
        id: str,
        device_id: str,
        now: datetime
    ) -> bool:
        """条件更新为已认领

        仅当记录仍未认领且未过期时更新，返回是否更新成功。
        """
        result = await db.execute(
            update(EnrollmentCode)
            .where(
                and_(
                    EnrollmentCode.id == id,
                    EnrollmentCode.claimed_at.is_(None),
                    EnrollmentCode.expires_at >= now
                )
            )
            .values(claimed_at=now, claimed_device_id=device_id)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1


# 创建实例
enrollment_code_crud = CRUDEnrollmentCode()
