"""注册事件模型"""
from __future__ import annotations

from sqlalchemy import JSON, Column, DateTime, Integer, String
from enrollment_api.app.database.db import Base
from enrollment_api.app.utils.timezone import utcnow


class EnrollmentEvent(Base):
    """注册审计事件表（只追加）"""
    __tablename__ = "enrollment_event"

    id = Column(Integer, primary_key=True, autoincrement=True, comment="事件ID")
    owner_id = Column(String(128), nullable=False, index=True, comment="所属账户ID")
    device_id = Column(String(36), nullable=True, comment="设备ID")
    type = Column(String(64), nullable=False, comment="事件类型")
    payload = Column(JSON, nullable=True, comment="事件内容")
    created_at = Column(DateTime, nullable=False, default=utcnow, comment="创建时间")

    def __repr__(self) -> str:
        return f"<EnrollmentEvent(id={self.id}, type='{self.type}', device_id='{self.device_id}')>"
