"""Service业务逻辑模块"""
from __future__ import annotations

from .enrollment import EnrollmentService, DEVICE_ENROLLED_EVENT
from .maintenance import MaintenanceLog, MaintenanceLogEntry, MaintenanceService

__all__ = [
    "EnrollmentService",
    "DEVICE_ENROLLED_EVENT",
    "MaintenanceLog",
    "MaintenanceLogEntry",
    "MaintenanceService"
]
