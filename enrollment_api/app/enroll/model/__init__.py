"""注册模型模块"""
from __future__ import annotations

from .enrollment_code import EnrollmentCode
from .device import Device
from .enrollment_event import EnrollmentEvent

__all__ = ["EnrollmentCode", "Device", "EnrollmentEvent"]
