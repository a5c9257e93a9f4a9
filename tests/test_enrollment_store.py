from __future__ import annotations

import asyncio
from datetime import datetime, timedelta

import pytest

from enrollment_api.app.enroll.crud import ClaimOutcome, EnrollmentConflict
from enrollment_api.app.utils.timezone import utcnow

pytestmark = pytest.mark.anyio


def _now() -> datetime:
    return utcnow().replace(microsecond=0)


async def test_create_pending_persists_unclaimed_record(store):
    now = _now()
    record = await store.create_pending("u1", "AB12CD34", now + timedelta(minutes=15))

    assert record.id
    assert record.owner_id == "u1"
    assert record.code == "AB12CD34"
    assert record.claimed_at is None
    assert record.claimed_device_id is None

    stored = await store.get_by_code("AB12CD34")
    assert stored is not None
    assert stored.expires_at == now + timedelta(minutes=15)


async def test_create_pending_rejects_duplicate_code(store):
    expires_at = _now() + timedelta(minutes=15)
    await store.create_pending("u1", "AB12CD34", expires_at)

    with pytest.raises(EnrollmentConflict) as excinfo:
        await store.create_pending("u2", "AB12CD34", expires_at)
    assert excinfo.value.code == "AB12CD34"

    stored = await store.get_by_code("AB12CD34")
    assert stored.owner_id == "u1"


async def test_claim_creates_device_and_marks_code(store):
    now = _now()
    await store.create_pending("u1", "AB12CD34", now + timedelta(minutes=15))

    result = await store.claim("AB12CD34", now, "Kitchen iPad", "ios")

    assert result.ok
    assert result.outcome is ClaimOutcome.CLAIMED
    assert result.owner_id == "u1"
    assert result.device.name == "Kitchen iPad"
    assert result.device.platform == "ios"

    record = await store.get_by_code("AB12CD34")
    assert record.claimed_at == now
    assert record.claimed_device_id == result.device.id
    assert await store.count_devices("u1") == 1


async def test_second_claim_is_already_claimed(store):
    now = _now()
    await store.create_pending("u1", "AB12CD34", now + timedelta(minutes=15))
    first = await store.claim("AB12CD34", now, "Kitchen iPad", "ios")

    second = await store.claim("AB12CD34", now + timedelta(seconds=5), "Other", "android")

    assert first.ok
    assert second.outcome is ClaimOutcome.ALREADY_CLAIMED
    assert second.device is None
    assert await store.count_devices() == 1


async def test_claimed_record_is_not_rechecked_for_expiry(store):
    now = _now()
    await store.create_pending("u1", "AB12CD34", now + timedelta(minutes=15))
    await store.claim("AB12CD34", now, "Kitchen iPad", "ios")

    later = await store.claim("AB12CD34", now + timedelta(hours=1), "Kitchen iPad", "ios")

    assert later.outcome is ClaimOutcome.ALREADY_CLAIMED


async def test_expired_code_cannot_be_claimed(store):
    now = _now()
    await store.create_pending("u1", "AB12CD34", now - timedelta(seconds=1))

    result = await store.claim("AB12CD34", now, "Kitchen iPad", "ios")

    assert result.outcome is ClaimOutcome.EXPIRED
    assert await store.count_devices() == 0
    record = await store.get_by_code("AB12CD34")
    assert record.claimed_at is None


async def test_code_is_claimable_at_exact_expiry(store):
    now = _now()
    await store.create_pending("u1", "AB12CD34", now)

    result = await store.claim("AB12CD34", now, "Kitchen iPad", "ios")

    assert result.outcome is ClaimOutcome.CLAIMED


async def test_unknown_code_is_not_found(store):
    result = await store.claim("ZZZZZZZZ", _now(), "Kitchen iPad", "ios")

    assert result.outcome is ClaimOutcome.NOT_FOUND
    assert result.owner_id is None


async def test_concurrent_claims_yield_single_device(store):
    now = _now()
    await store.create_pending("u1", "AB12CD34", now + timedelta(minutes=15))

    results = await asyncio.gather(
        *(store.claim("AB12CD34", now, f"Device {i}", "ios") for i in range(6))
    )

    claimed = [r for r in results if r.ok]
    rejected = [r for r in results if not r.ok]
    assert len(claimed) == 1
    assert len(rejected) == 5
    assert all(r.outcome is ClaimOutcome.ALREADY_CLAIMED for r in rejected)
    assert await store.count_devices("u1") == 1

    record = await store.get_by_code("AB12CD34")
    assert record.claimed_device_id == claimed[0].device.id


async def test_append_event_is_persisted(store):
    await store.append_event("u1", "device-1", "device.enrolled", {"name": "Kitchen iPad"})

    events = await store.list_events("u1")

    assert len(events) == 1
    assert events[0].type == "device.enrolled"
    assert events[0].device_id == "device-1"
    assert events[0].payload == {"name": "Kitchen iPad"}


async def test_append_event_failure_is_swallowed(store):
    # owner_id 违反非空约束
    await store.append_event(None, "device-1", "device.enrolled")

    assert await store.list_events("u1") == []
