from __future__ import annotations

from datetime import timedelta

import pytest

from rpgvault.locks.errors import LockConflict, LockForbidden
from rpgvault.locks.manager import LockManager

from conftest import FakeClock


def test_acquire_uses_default_duration(lock_manager: LockManager, clock: FakeClock) -> None:
    lock = lock_manager.acquire("gs-1", "alice")

    assert lock.resource_id == "gs-1"
    assert lock.owner_user_id == "alice"
    assert lock.acquired_at == clock.now
    assert lock.expires_at == clock.now + timedelta(minutes=30)


def test_acquire_with_explicit_duration(lock_manager: LockManager, clock: FakeClock) -> None:
    lock = lock_manager.acquire("gs-1", "alice", duration_minutes=5)

    assert lock.expires_at - lock.acquired_at == timedelta(minutes=5)


def test_other_user_conflicts_until_expiry(lock_manager: LockManager, clock: FakeClock) -> None:
    held = lock_manager.acquire("gs-1", "alice", duration_minutes=10)

    with pytest.raises(LockConflict) as excinfo:
        lock_manager.acquire("gs-1", "bob")
    assert excinfo.value.expires_at == held.expires_at
    assert excinfo.value.current.owner_user_id == "alice"

    clock.advance(minutes=9)
    with pytest.raises(LockConflict):
        lock_manager.acquire("gs-1", "bob")

    clock.advance(minutes=1, seconds=1)
    taken = lock_manager.acquire("gs-1", "bob")
    assert taken.owner_user_id == "bob"


def test_reentrant_acquire_refreshes_lock(lock_manager: LockManager, clock: FakeClock) -> None:
    first = lock_manager.acquire("gs-1", "alice", duration_minutes=10)
    clock.advance(minutes=5)

    second = lock_manager.acquire("gs-1", "alice", duration_minutes=10)

    assert second.owner_user_id == "alice"
    assert second.expires_at == first.expires_at + timedelta(minutes=5)
    assert len(lock_manager.list_all()) == 1


def test_get_treats_expired_lock_as_absent(lock_manager: LockManager, clock: FakeClock) -> None:
    lock_manager.acquire("gs-1", "alice", duration_minutes=1)
    assert lock_manager.get("gs-1") is not None

    clock.advance(minutes=1, microseconds=1)

    assert lock_manager.get("gs-1") is None
    assert len(lock_manager.store) == 0
    assert not lock_manager.is_locked("gs-1")


def test_is_locked_by_user(lock_manager: LockManager) -> None:
    lock_manager.acquire("gs-1", "alice")

    assert lock_manager.is_locked("gs-1")
    assert lock_manager.is_locked_by_user("gs-1", "alice")
    assert not lock_manager.is_locked_by_user("gs-1", "bob")
    assert not lock_manager.is_locked("gs-2")


def test_release_is_idempotent(lock_manager: LockManager) -> None:
    lock_manager.acquire("gs-1", "alice")

    lock_manager.release("gs-1", "alice")
    lock_manager.release("gs-1", "alice")

    assert lock_manager.get("gs-1") is None


def test_release_by_non_owner_is_forbidden(lock_manager: LockManager) -> None:
    lock_manager.acquire("gs-1", "alice")

    with pytest.raises(LockForbidden):
        lock_manager.release("gs-1", "bob")
    assert lock_manager.is_locked_by_user("gs-1", "alice")


def test_release_of_expired_lock_is_silent_for_anyone(
    lock_manager: LockManager, clock: FakeClock
) -> None:
    lock_manager.acquire("gs-1", "alice", duration_minutes=1)
    clock.advance(minutes=2)

    lock_manager.release("gs-1", "bob")

    assert "gs-1" not in lock_manager.store


def test_renew_requires_existing_lock(lock_manager: LockManager) -> None:
    with pytest.raises(LockConflict):
        lock_manager.renew("gs-1", "alice")


def test_renew_by_non_owner_is_forbidden(lock_manager: LockManager) -> None:
    lock_manager.acquire("gs-1", "alice")

    with pytest.raises(LockForbidden):
        lock_manager.renew("gs-1", "bob")


def test_renew_extends_expiry_and_keeps_acquired_at(
    lock_manager: LockManager, clock: FakeClock
) -> None:
    original = lock_manager.acquire("gs-1", "alice", duration_minutes=10)
    clock.advance(minutes=8)

    renewed = lock_manager.renew("gs-1", "alice", duration_minutes=20)

    assert renewed.acquired_at == original.acquired_at
    assert renewed.resource_id == "gs-1"
    assert renewed.expires_at == clock.now + timedelta(minutes=20)
    assert lock_manager.get("gs-1") == renewed


def test_expired_but_unswept_lock_can_be_renewed_by_owner(
    lock_manager: LockManager, clock: FakeClock
) -> None:
    lock_manager.acquire("gs-1", "alice", duration_minutes=1)
    clock.advance(minutes=5)

    renewed = lock_manager.renew("gs-1", "alice")

    assert renewed.expires_at == clock.now + timedelta(minutes=30)
    assert lock_manager.is_locked_by_user("gs-1", "alice")


def test_non_positive_duration_is_rejected(lock_manager: LockManager) -> None:
    with pytest.raises(ValueError):
        lock_manager.acquire("gs-1", "alice", duration_minutes=0)
    with pytest.raises(ValueError):
        lock_manager.renew("gs-1", "alice", duration_minutes=-5)


def test_listing_filters_expired_and_by_user(lock_manager: LockManager, clock: FakeClock) -> None:
    lock_manager.acquire("gs-1", "alice", duration_minutes=60)
    lock_manager.acquire("gs-2", "bob", duration_minutes=60)
    lock_manager.acquire("gs-3", "alice", duration_minutes=1)
    clock.advance(minutes=2)

    assert {lock.resource_id for lock in lock_manager.list_all()} == {"gs-1", "gs-2"}
    assert [lock.resource_id for lock in lock_manager.list_for_user("alice")] == ["gs-1"]
    assert lock_manager.list_for_user("carol") == []


def test_force_release_ignores_ownership(lock_manager: LockManager) -> None:
    lock_manager.acquire("gs-1", "alice")

    lock_manager.force_release("gs-1")
    lock_manager.force_release("gs-unknown")

    assert lock_manager.get("gs-1") is None
    lock_manager.acquire("gs-1", "bob")


def test_release_all_for_user_includes_expired(
    lock_manager: LockManager, clock: FakeClock
) -> None:
    lock_manager.acquire("gs-1", "alice", duration_minutes=1)
    lock_manager.acquire("gs-2", "alice", duration_minutes=60)
    lock_manager.acquire("gs-3", "bob", duration_minutes=60)
    clock.advance(minutes=5)

    lock_manager.release_all_for_user("alice")

    assert [rid for rid, _ in lock_manager.store.items()] == ["gs-3"]


def test_statistics_do_not_sweep(lock_manager: LockManager, clock: FakeClock) -> None:
    lock_manager.acquire("gs-1", "alice", duration_minutes=1)
    lock_manager.acquire("gs-2", "alice", duration_minutes=60)
    lock_manager.acquire("gs-3", "bob", duration_minutes=60)
    clock.advance(minutes=2)

    stats = lock_manager.statistics()

    assert stats.total_locks == 3
    assert stats.live_locks == 2
    assert stats.expired_locks == 1
    assert stats.total_locks == stats.live_locks + stats.expired_locks
    assert stats.locks_by_user == {"alice": 2, "bob": 1}
    assert len(lock_manager.store) == 3


def test_sweep_expired_is_idempotent(lock_manager: LockManager, clock: FakeClock) -> None:
    lock_manager.acquire("gs-1", "alice", duration_minutes=1)
    lock_manager.acquire("gs-2", "bob", duration_minutes=1)
    lock_manager.acquire("gs-3", "bob", duration_minutes=60)
    clock.advance(minutes=2)

    assert lock_manager.sweep_expired() == 2
    assert lock_manager.sweep_expired() == 0
    assert lock_manager.perform_scheduled_sweep() == 0
    assert lock_manager.statistics().expired_locks == 0


def test_default_duration_must_be_positive() -> None:
    with pytest.raises(ValueError):
        LockManager(default_duration_minutes=0)
