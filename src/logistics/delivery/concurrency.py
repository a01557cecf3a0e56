"""Per-delivery serialization and bounded retries of transient storage errors.

Mutations of one delivery never interleave: a second request for a delivery
that is already being modified loses immediately with ``Conflict`` instead of
queueing. Requests for different deliveries never wait on each other.

Transient storage failures are retried a few times with a linear backoff and
then surface as ``Unavailable``. ``Conflict`` is never retried.
"""

import os
import threading
import time
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import TypeVar

from protean.exceptions import ExpectedVersionError
from sqlalchemy.exc import OperationalError

from logistics.errors import Conflict, Unavailable
from logistics.utils.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

TRANSIENT_ERRORS = (OperationalError, ConnectionError, TimeoutError)


class DeliveryGuard:
    """Registry of delivery ids with a mutation in flight."""

    def __init__(self):
        self._mutex = threading.Lock()
        self._in_flight: set[str] = set()

    @contextmanager
    def hold(self, delivery_id) -> Iterator[None]:
        key = str(delivery_id)
        with self._mutex:
            if key in self._in_flight:
                raise Conflict(
                    "single_writer",
                    f"Delivery {key} is being modified by another request",
                )
            self._in_flight.add(key)
        try:
            yield
        finally:
            with self._mutex:
                self._in_flight.discard(key)

    def is_held(self, delivery_id) -> bool:
        with self._mutex:
            return str(delivery_id) in self._in_flight


_guard = DeliveryGuard()


def get_guard() -> DeliveryGuard:
    return _guard


class RevisionClaims:
    """Latest revision written per delivery, for stores without real transactions.

    The in-memory provider commits a private copy of the whole store, so two
    units of work that loaded the same revision would both succeed. Claiming
    ``loaded -> new`` here before the write lets only the first of them through.
    """

    def __init__(self):
        self._mutex = threading.Lock()
        self._claimed: dict[str, int] = {}

    def claim(self, delivery_id, loaded_revision: int, new_revision: int) -> int | None:
        """Record ``new_revision`` and return what was recorded before it."""
        key = str(delivery_id)
        with self._mutex:
            current = self._claimed.get(key)
            if current is not None and current > loaded_revision:
                raise Conflict(
                    "revision_current",
                    f"Delivery {key} moved to revision {current} after it was read at {loaded_revision}",
                )
            self._claimed[key] = new_revision
            return current

    def release(self, delivery_id, new_revision: int, previous: int | None) -> None:
        """Undo a claim whose write never reached storage."""
        key = str(delivery_id)
        with self._mutex:
            if self._claimed.get(key) != new_revision:
                return
            if previous is None:
                del self._claimed[key]
            else:
                self._claimed[key] = previous

    def reset(self) -> None:
        with self._mutex:
            self._claimed.clear()


_claims = RevisionClaims()


def get_claims() -> RevisionClaims:
    return _claims


def retry_settings() -> tuple[int, float]:
    attempts = int(os.environ.get("STORAGE_RETRY_ATTEMPTS", "3"))
    backoff = float(os.environ.get("STORAGE_RETRY_BACKOFF_SECONDS", "0.05"))
    return max(attempts, 1), max(backoff, 0.0)


def with_storage_retries(operation: Callable[[], T], intent: str) -> T:
    """Run ``operation``, retrying transient storage errors a bounded number of times."""
    attempts, backoff = retry_settings()
    attempt = 1
    while True:
        try:
            return operation()
        except ExpectedVersionError as exc:
            raise Conflict("revision_current", f"Concurrent update detected during {intent}") from exc
        except TRANSIENT_ERRORS as exc:
            if attempt >= attempts:
                logger.error("Storage unavailable", intent=intent, attempts=attempts, error=str(exc))
                raise Unavailable(
                    "storage_available",
                    f"Storage failed {attempts} times during {intent}",
                ) from exc
            logger.warning("Transient storage error, retrying", intent=intent, attempt=attempt, error=str(exc))
            time.sleep(backoff * attempt)
            attempt += 1


def check_expected_revision(delivery, expected_revision: int | None) -> None:
    """Compare-and-swap guard for callers that read the delivery before acting."""
    if expected_revision is not None and expected_revision != delivery.revision:
        raise Conflict(
            "revision_current",
            f"Delivery {delivery.id} is at revision {delivery.revision}, not {expected_revision}",
        )
