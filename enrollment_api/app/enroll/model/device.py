"""设备模型"""
from __future__ import annotations

import uuid
from sqlalchemy import Column, DateTime, String
from enrollment_api.app.database.db import Base
from enrollment_api.app.utils.timezone import utcnow


class Device(Base):
    """设备表"""
    __tablename__ = "device"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()), comment="设备ID")
    owner_id = Column(String(128), nullable=False, index=True, comment="所属账户ID")
    name = Column(String(80), nullable=False, comment="设备名称")
    platform = Column(String(20), nullable=False, comment="平台")
    created_at = Column(DateTime, nullable=False, default=utcnow, comment="创建时间")

    def __repr__(self) -> str:
        return f"<Device(id='{self.id}', owner_id='{self.owner_id}', platform='{self.platform}')>"
