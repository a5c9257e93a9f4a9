"""CRUD操作模块"""
from __future__ import annotations

from .enrollment_code import enrollment_code_crud
from .device import device_crud
from .enrollment_event import enrollment_event_crud
from .store import (
    EnrollmentStore,
    EnrollmentConflict,
    ClaimOutcome,
    ClaimResult,
    classify_claim
)

__all__ = [
    "enrollment_code_crud",
    "device_crud",
    "enrollment_event_crud",
    "EnrollmentStore",
    "EnrollmentConflict",
    "ClaimOutcome",
    "ClaimResult",
    "classify_claim"
]
