"""Schema模块"""
from __future__ import annotations

from .enrollment import (
    EnrollmentCreateResponse,
    EnrollmentClaimRequest,
    EnrollmentClaimResponse
)
from .maintenance import (
    MaintenanceRequest,
    MaintenanceResponse,
    MaintenanceLogEntryResponse,
    MaintenanceLogsResponse
)
from .system import HealthResponse, PublicConfigResponse

__all__ = [
    "EnrollmentCreateResponse",
    "EnrollmentClaimRequest",
    "EnrollmentClaimResponse",
    "MaintenanceRequest",
    "MaintenanceResponse",
    "MaintenanceLogEntryResponse",
    "MaintenanceLogsResponse",
    "HealthResponse",
    "PublicConfigResponse"
]
