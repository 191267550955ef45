"""Poll applied resources until they are ready or the timeout elapses."""

from __future__ import annotations

import logging
import math
import time
from collections.abc import Callable, Sequence

from tenacity import RetryCallState, Retrying, retry_if_result, stop_after_delay

from ..domain.errors import ClusterAPIError, ReadinessTimeoutError
from ..domain.models import ResourceRef
from ..domain.readiness import is_ready
from .ports import ClusterClient

logger = logging.getLogger(__name__)


class ReadinessWaiter:
    """Block until every resource of a set reports ready.

    Args:
        client: Cluster client used to read live objects.
        poll_interval: Seconds between two checks.
        sleep: Sleep function, replaceable in tests.
    """

    def __init__(
        self,
        client: ClusterClient,
        *,
        poll_interval: float = 2.0,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if poll_interval <= 0:
            raise ValueError(f"poll_interval must be positive, got {poll_interval}")
        self._client = client
        self._poll_interval = poll_interval
        self._sleep = sleep

    def unready(
        self,
        resources: Sequence[ResourceRef],
        *,
        deadline: float | None = None,
        previous: Sequence[ResourceRef] | None = None,
    ) -> list[ResourceRef]:
        """Return the resources that are not ready right now.

        A resource that cannot be read counts as not ready. Once the
        ``time.monotonic()`` *deadline* has passed, the remaining resources
        are not read and keep their status from *previous*, the result of the
        last check.
        """
        pending: list[ResourceRef] = []
        for index, ref in enumerate(resources):
            if deadline is not None and time.monotonic() >= deadline:
                skipped = resources[index:]
                logger.debug("Readiness deadline passed, reusing last status", extra={"skipped": len(skipped)})
                pending.extend(r for r in skipped if previous is None or r in previous)
                break
            try:
                live = self._client.get(ref.kind, ref.name, ref.namespace)
            except ClusterAPIError as exc:
                logger.debug("Readiness check failed", extra={"resource": str(ref), "error": str(exc)})
                live = None
            if not is_ready(live):
                pending.append(ref)
        return pending

    def wait_ready(self, resources: Sequence[ResourceRef], timeout: float, *, dry_run: bool = False) -> None:
        """Poll until all *resources* are ready.

        ``timeout`` bounds the wait; ``0`` checks exactly once. Under
        ``dry_run`` nothing was applied, so there is nothing to wait for.

        Raises:
            ReadinessTimeoutError: Naming every resource still not ready
                once *timeout* seconds have passed.
        """
        if dry_run:
            logger.info("Dry run: skipping readiness wait")
            return
        if not math.isfinite(timeout) or timeout < 0:
            raise ValueError(f"timeout must be a finite, non-negative number of seconds, got {timeout}")
        # Past the cutoff a poll stops reading and reuses the previous result.
        cutoff = time.monotonic() + timeout + self._poll_interval
        last: list[ResourceRef] | None = None

        def _check(refs: Sequence[ResourceRef]) -> list[ResourceRef]:
            nonlocal last
            last = self.unready(refs, deadline=cutoff if last is not None else None, previous=last)
            return last

        def _wait(retry_state: RetryCallState) -> float:
            remaining = timeout - retry_state.seconds_since_start
            return max(0.0, min(self._poll_interval, remaining))

        def _log_pending(retry_state: RetryCallState) -> None:
            pending = retry_state.outcome.result() if retry_state.outcome else []
            logger.info(
                "Waiting for resources to become ready",
                extra={"pending": [str(ref) for ref in pending], "attempt": retry_state.attempt_number},
            )

        retrying = Retrying(
            stop=stop_after_delay(timeout),
            wait=_wait,
            retry=retry_if_result(bool),
            before_sleep=_log_pending,
            retry_error_callback=lambda state: state.outcome.result() if state.outcome else list(resources),
            sleep=self._sleep,
        )
        pending: list[ResourceRef] = retrying(_check, resources)
        if pending:
            raise ReadinessTimeoutError([str(ref) for ref in pending], timeout)
        logger.info("All resources ready", extra={"count": len(resources)})


__all__ = ["ReadinessWaiter"]
