"""
Concurrency control utilities shared by the order and payment apps.

Two mechanisms live here:

1. **Distributed Locks** (DistributedLock)
   - Redis-based mutual exclusion across processes
   - TTL releases the lock if the holder crashes
   - Used to single-flight payments for one customer

2. **Optimistic Locking** (check_version)
   - Version-based conflict detection at write time
   - Used when committing an order as delivered

Usage:

    from core.locks import DistributedLock, check_version

    with DistributedLock(f"order-payment:{customer_id}", ttl=60):
        pay_for_active_order(customer)

    with transaction.atomic():
        order = check_version(Order, order_id, expected_version=3)
        order.deliver()
        order.save()  # Version auto-increments
"""

from __future__ import annotations

import time
import uuid as uuid_module
from typing import TYPE_CHECKING, TypeVar

from django.db import models, transaction

from django_redis import get_redis_connection

from core.exceptions import LockAcquisitionError, NotFoundError, StaleRecordError

if TYPE_CHECKING:
    from typing import Any

    from redis import Redis

T = TypeVar("T", bound=models.Model)


# =============================================================================
# Distributed Locks
# =============================================================================


class DistributedLock:
    """
    Redis-based distributed lock with TTL.

    Ownership is tracked with a random token so a process can only
    release a lock it acquired itself.

    Example:
        with DistributedLock("order-payment:42", ttl=60, timeout=5.0):
            orchestrator.create_order_payment(customer, selection)

    Args:
        key: Lock identifier (prefixed with "lock:")
        ttl: Seconds before Redis expires the lock
        blocking: If True, acquire() polls until the lock frees up
        timeout: Maximum wait in seconds when blocking
    """

    RELEASE_SCRIPT = """
    if redis.call("get", KEYS[1]) == ARGV[1] then
        return redis.call("del", KEYS[1])
    else
        return 0
    end
    """

    POLL_INTERVAL = 0.05

    def __init__(
        self,
        key: str,
        ttl: int = 30,
        blocking: bool = True,
        timeout: float = 10.0,
    ) -> None:
        self.key = f"lock:{key}"
        self.ttl = ttl
        self.blocking = blocking
        self.timeout = timeout
        self._token: str | None = None
        self._redis: Redis | None = None

    def _get_redis(self) -> Redis:
        if self._redis is None:
            self._redis = get_redis_connection("default")
        return self._redis

    def acquire(self) -> bool:
        """
        Acquire the lock.

        Returns:
            True once the lock is held

        Raises:
            LockAcquisitionError: If the lock is held elsewhere (non-blocking)
                or could not be taken within ``timeout`` (blocking)
        """
        token = str(uuid_module.uuid4())
        redis = self._get_redis()

        if self.blocking:
            deadline = time.monotonic() + self.timeout
            while time.monotonic() < deadline:
                if self._try_acquire(redis, token):
                    return True
                time.sleep(self.POLL_INTERVAL)

            raise LockAcquisitionError(
                f"Failed to acquire lock '{self.key}' within {self.timeout}s",
                details={"key": self.key, "timeout": self.timeout},
            )

        if not self._try_acquire(redis, token):
            raise LockAcquisitionError(
                f"Lock '{self.key}' is already held",
                details={"key": self.key},
            )
        return True

    def _try_acquire(self, redis: Redis, token: str) -> bool:
        acquired = bool(redis.set(self.key, token, nx=True, ex=self.ttl))
        if acquired:
            self._token = token
        return acquired

    def release(self) -> bool:
        """
        Release the lock if this instance holds it.

        Returns:
            True if Redis deleted the key, False otherwise. Safe to call twice.
        """
        if self._token is None:
            return False

        result = self._get_redis().eval(self.RELEASE_SCRIPT, 1, self.key, self._token)
        self._token = None
        return bool(result)

    @property
    def is_held(self) -> bool:
        return self._token is not None

    def __enter__(self) -> DistributedLock:
        self.acquire()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> bool:
        self.release()
        return False


# =============================================================================
# Optimistic Locking
# =============================================================================


def check_version(
    model_class: type[T],
    pk: Any,
    expected_version: int,
) -> T:
    """
    Lock a record for update, verifying it still has the expected version.

    Args:
        model_class: Model class with a ``version`` field
        pk: Primary key of the record
        expected_version: Version the caller read earlier

    Returns:
        The row-locked instance. The lock lasts until the enclosing
        transaction ends, so call this inside ``transaction.atomic()``.

    Raises:
        StaleRecordError: If the record was modified since it was read
        NotFoundError: If the record no longer exists
    """
    model_name = model_class.__name__

    with transaction.atomic():
        instance = (
            model_class.objects.select_for_update()
            .filter(pk=pk, version=expected_version)
            .first()
        )
        if instance is not None:
            return instance

        current_version = (
            model_class.objects.filter(pk=pk)
            .values_list("version", flat=True)
            .first()
        )
        if current_version is None:
            raise NotFoundError(
                f"{model_name} {pk} not found",
                error_code=f"{model_name.upper()}_NOT_FOUND",
                details={"pk": str(pk)},
            )

        raise StaleRecordError(
            f"{model_name} {pk} has been modified "
            f"(expected version {expected_version}, current {current_version})",
            details={
                "pk": str(pk),
                "expected_version": expected_version,
                "current_version": current_version,
            },
        )


__all__ = [
    "DistributedLock",
    "check_version",
]
