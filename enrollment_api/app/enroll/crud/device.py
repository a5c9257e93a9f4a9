"""设备CRUD操作"""
from __future__ import annotations

from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from enrollment_api.app.enroll.model import Device


class CRUDDevice:
    """设备CRUD操作类"""

    async def create(self, db: AsyncSession, obj_in: dict) -> Device:
        """创建设备"""
        db_obj = Device(**obj_in)
        db.add(db_obj)
        await db.flush()
        await db.refresh(db_obj)
        return db_obj

    async def count(self, db: AsyncSession, owner_id: Optional[str] = None) -> int:
        """统计设备数量"""
        query = select(func.count(Device.id))
        if owner_id:
            query = query.where(Device.owner_id == owner_id)
        result = await db.execute(query)
        return result.scalar() or 0


# 创建实例
device_crud = CRUDDevice()
