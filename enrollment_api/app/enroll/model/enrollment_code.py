"""注册码模型"""
from __future__ import annotations

import uuid
from sqlalchemy import Column, DateTime, String
from enrollment_api.app.database.db import Base
from enrollment_api.app.utils.timezone import utcnow


class EnrollmentCode(Base):
    """注册码表

    claimed_at 一旦写入即为终态，不再参与过期判断。
    """
    __tablename__ = "enrollment_code"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()), comment="注册码记录ID")
    owner_id = Column(String(128), nullable=False, index=True, comment="所属账户ID")
    code = Column(String(32), unique=True, nullable=False, comment="注册码")
    created_at = Column(DateTime, nullable=False, default=utcnow, comment="创建时间")
    expires_at = Column(DateTime, nullable=False, comment="过期时间")
    claimed_at = Column(DateTime, nullable=True, comment="认领时间")
    claimed_device_id = Column(String(36), nullable=True, comment="认领生成的设备ID")

    @property
    def is_claimed(self) -> bool:
        return self.claimed_at is not None

    def __repr__(self) -> str:
        return f"<EnrollmentCode(id='{self.id}', owner_id='{self.owner_id}', claimed={self.is_claimed})>"
