from __future__ import annotations

import asyncio
from datetime import datetime, timedelta
from typing import Any, List, Optional, Tuple

import pytest
from sqlalchemy.exc import OperationalError

from enrollment_api.app.common.auth import Principal
from enrollment_api.app.common.exception.errors import (
    CodeSpaceExhaustedException,
    EmptyCodeException,
    InvalidOrExpiredCodeException,
    TransientErrorException,
)
from enrollment_api.app.enroll.crud import ClaimOutcome, ClaimResult, EnrollmentConflict
from enrollment_api.app.enroll.model import Device, EnrollmentCode
from enrollment_api.app.enroll.service import DEVICE_ENROLLED_EVENT, EnrollmentService

pytestmark = pytest.mark.anyio

NOW = datetime(2026, 1, 1, 12, 0, 0)
OWNER = Principal(id="u1", email="owner@example.com")


class _FakeStore:
    def __init__(self, conflicts: int = 0, outcome: ClaimOutcome = ClaimOutcome.CLAIMED) -> None:
        self.conflicts = conflicts
        self.outcome = outcome
        self.created: List[Tuple[str, str, datetime]] = []
        self.claims: List[Tuple[str, datetime, str, str]] = []
        self.events: List[Tuple[str, Optional[str], str, Any]] = []
        self.claim_delay = 0.0
        self.claim_error: Optional[Exception] = None
        self.event_error: Optional[Exception] = None

    async def create_pending(self, owner_id: str, code: str, expires_at: datetime, created_at=None) -> EnrollmentCode:
        self.created.append((owner_id, code, expires_at))
        if len(self.created) <= self.conflicts:
            raise EnrollmentConflict(code)
        return EnrollmentCode(id="rec-1", owner_id=owner_id, code=code, created_at=created_at, expires_at=expires_at)

    async def claim(self, code: str, now: datetime, device_name: str, platform: str) -> ClaimResult:
        self.claims.append((code, now, device_name, platform))
        if self.claim_delay:
            await asyncio.sleep(self.claim_delay)
        if self.claim_error is not None:
            raise self.claim_error
        if self.outcome is not ClaimOutcome.CLAIMED:
            return ClaimResult(self.outcome)
        device = Device(id="dev-1", owner_id="u1", name=device_name, platform=platform, created_at=now)
        return ClaimResult(ClaimOutcome.CLAIMED, device=device)

    async def append_event(self, owner_id, device_id, type, payload=None) -> None:
        if self.event_error is not None:
            raise self.event_error
        self.events.append((owner_id, device_id, type, payload))


def _codes(*codes: str):
    it = iter(codes)
    return lambda: next(it)


def _service(store, settings, codes=("AB12CD34", "EF56GH78", "IJ90KL12", "MN34OP56"), clock=lambda: NOW):
    return EnrollmentService(store, settings, code_generator=_codes(*codes), clock=clock)


async def test_create_enrollment_sets_fifteen_minute_expiry(settings):
    store = _FakeStore()

    result = await _service(store, settings).create_enrollment(OWNER)

    assert result["code"] == "AB12CD34"
    assert result["expires_at"] == NOW + timedelta(minutes=15)
    assert result["expires_in"] == 900
    assert store.created == [("u1", "AB12CD34", NOW + timedelta(minutes=15))]


async def test_create_enrollment_retries_on_conflict(settings):
    store = _FakeStore(conflicts=2)

    result = await _service(store, settings).create_enrollment(OWNER)

    assert result["code"] == "IJ90KL12"
    assert [code for _, code, _ in store.created] == ["AB12CD34", "EF56GH78", "IJ90KL12"]


async def test_create_enrollment_gives_up_after_bounded_attempts(settings):
    store = _FakeStore(conflicts=10)

    with pytest.raises(CodeSpaceExhaustedException) as excinfo:
        await _service(store, settings).create_enrollment(OWNER)

    assert excinfo.value.status_code == 500
    assert excinfo.value.error == "Exhausted"
    assert len(store.created) == 3


@pytest.mark.parametrize("code", [None, "", "   ", "\t\n"])
async def test_empty_code_is_rejected_without_store(settings, code):
    store = _FakeStore()

    with pytest.raises(EmptyCodeException) as excinfo:
        await _service(store, settings).claim_enrollment(code)

    assert excinfo.value.status_code == 400
    assert store.claims == []


@pytest.mark.parametrize("code", ["abc", "AB12CD3", "AB12CD345", "AB-2CD34", "ÄB12CD34"])
async def test_malformed_code_is_rejected_without_store(settings, code):
    store = _FakeStore()

    with pytest.raises(InvalidOrExpiredCodeException) as excinfo:
        await _service(store, settings).claim_enrollment(code)

    assert excinfo.value.error == "InvalidOrExpiredCode"
    assert store.claims == []


async def test_claim_normalizes_code_and_applies_defaults(settings):
    store = _FakeStore()

    result = await _service(store, settings).claim_enrollment("  ab12cd34 ")

    assert result == {"device_id": "dev-1", "owner_id": "u1"}
    assert store.claims == [("AB12CD34", NOW, "New Device", "ios")]


async def test_claim_treats_blank_device_fields_as_absent(settings):
    store = _FakeStore()

    await _service(store, settings).claim_enrollment("AB12CD34", device_name="   ", platform="")

    assert store.claims[0][2:] == ("New Device", "ios")


async def test_claim_truncates_device_fields(settings):
    store = _FakeStore()

    await _service(store, settings).claim_enrollment("AB12CD34", device_name="n" * 200, platform="p" * 50)

    _, _, name, platform = store.claims[0]
    assert name == "n" * 80
    assert platform == "p" * 20


@pytest.mark.parametrize(
    "outcome",
    [ClaimOutcome.NOT_FOUND, ClaimOutcome.EXPIRED, ClaimOutcome.ALREADY_CLAIMED],
)
async def test_store_rejections_collapse_to_single_client_error(settings, outcome):
    store = _FakeStore(outcome=outcome)

    with pytest.raises(InvalidOrExpiredCodeException) as excinfo:
        await _service(store, settings).claim_enrollment("AB12CD34")

    assert excinfo.value.reason is outcome
    assert excinfo.value.detail == {
        "ok": False,
        "error": "InvalidOrExpiredCode",
        "message": "Enrollment code is invalid or expired",
    }
    assert store.events == []


async def test_successful_claim_records_event(settings):
    store = _FakeStore()

    await _service(store, settings).claim_enrollment("AB12CD34", device_name="Kitchen iPad")

    assert store.events == [
        ("u1", "dev-1", DEVICE_ENROLLED_EVENT, {"name": "Kitchen iPad", "platform": "ios"})
    ]


async def test_event_failure_does_not_fail_claim(settings):
    store = _FakeStore()
    store.event_error = RuntimeError("event sink down")

    result = await _service(store, settings).claim_enrollment("AB12CD34")

    assert result["device_id"] == "dev-1"


async def test_store_timeout_is_transient(settings):
    settings.store_timeout_seconds = 0.05
    store = _FakeStore()
    store.claim_delay = 1.0

    with pytest.raises(TransientErrorException) as excinfo:
        await _service(store, settings).claim_enrollment("AB12CD34")

    assert excinfo.value.status_code == 503
    assert excinfo.value.headers["Retry-After"] == "1"
    assert store.events == []


async def test_store_connectivity_error_is_transient(settings):
    store = _FakeStore()
    store.claim_error = OperationalError("UPDATE enrollment_code", {}, Exception("database is locked"))

    with pytest.raises(TransientErrorException):
        await _service(store, settings).claim_enrollment("AB12CD34")


async def test_create_then_claim_against_real_store(store, settings):
    service = EnrollmentService(store, settings)

    created = await service.create_enrollment(OWNER)
    claimed = await service.claim_enrollment(created["code"].lower(), device_name="Kitchen iPad")

    assert claimed["owner_id"] == "u1"
    assert await store.count_devices("u1") == 1
    events = await store.list_events("u1")
    assert [event.type for event in events] == [DEVICE_ENROLLED_EVENT]

    with pytest.raises(InvalidOrExpiredCodeException) as excinfo:
        await service.claim_enrollment(created["code"])
    assert excinfo.value.reason is ClaimOutcome.ALREADY_CLAIMED
    assert await store.count_devices("u1") == 1


async def test_claim_after_ttl_is_expired(store, settings):
    current = {"now": NOW}
    service = EnrollmentService(store, settings, clock=lambda: current["now"])

    created = await service.create_enrollment(OWNER)
    current["now"] = NOW + timedelta(minutes=15, seconds=1)

    with pytest.raises(InvalidOrExpiredCodeException) as excinfo:
        await service.claim_enrollment(created["code"])

    assert excinfo.value.reason is ClaimOutcome.EXPIRED
    assert await store.count_devices() == 0


async def test_concurrent_claims_through_service(store, settings):
    service = EnrollmentService(store, settings)
    created = await service.create_enrollment(OWNER)

    results = await asyncio.gather(
        *(service.claim_enrollment(created["code"], device_name=f"Device {i}") for i in range(5)),
        return_exceptions=True,
    )

    successes = [r for r in results if isinstance(r, dict)]
    failures = [r for r in results if isinstance(r, InvalidOrExpiredCodeException)]
    assert len(successes) == 1
    assert len(failures) == 4
    assert await store.count_devices("u1") == 1
