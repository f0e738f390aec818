from __future__ import annotations

import time
from collections.abc import Callable
from typing import TypeVar

from tenacity import RetryCallState, RetryError, Retrying, retry_if_result, wait_fixed

from .core import DEFAULT_POLL_INTERVAL, DEFAULT_WAIT_TIMEOUT
from .exceptions import OperationError, OperationTimeoutError
from .logger import logger
from .reporter import Reporter, ReportLevel
from .schemas.operations import OperationSnapshot, OperationStatus, StatusSnapshot

S = TypeVar("S", bound=StatusSnapshot)


class OperationPoller:
    """
    Drives a status source until it reports the desired status.

    The same loop serves two protocols: waiting for a zone Operation to reach
    DONE, and waiting for a freshly created resource to reach its own ready
    status (RUNNING for instances, READY for disks).

    `sleep` and `clock` are injectable so callers can drive time explicitly.
    """

    def __init__(
        self,
        reporter: Reporter,
        timeout: float = DEFAULT_WAIT_TIMEOUT,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.reporter = reporter
        self.timeout = timeout
        self.poll_interval = poll_interval
        self.sleep = sleep
        self.clock = clock

    def await_completion(
        self,
        fetch_status: Callable[[], S],
        desired_status: str,
        timeout: float | None = None,
        poll_interval: float | None = None,
        description: str = "request",
    ) -> S:
        """
        Polls `fetch_status` until its status equals `desired_status`.

        Returns the first snapshot carrying the desired status. Raises
        OperationError if that snapshot carries errors, and
        OperationTimeoutError if the deadline passes first. Exceptions raised
        by `fetch_status` propagate unchanged.
        """
        timeout = self.timeout if timeout is None else timeout
        interval = self.poll_interval if poll_interval is None else poll_interval
        deadline = self.clock() + timeout
        last_status: str | None = None
        polls = 0

        def poll() -> S:
            nonlocal last_status, polls
            snapshot = fetch_status()
            polls += 1
            current = snapshot.status
            logger.debug(f"Poll #{polls} for {description}: {current}")

            if current != desired_status:
                if current == last_status:
                    self.reporter.report(ReportLevel.PROGRESS, ".")
                else:
                    self.reporter.report(
                        ReportLevel.INFO, f"Current status: {current}."
                    )
            last_status = current
            return snapshot

        def deadline_reached(retry_state: RetryCallState) -> bool:
            # Stop early if the next poll would land past the deadline
            now = self.clock()
            return now >= deadline or now + interval > deadline

        retrying = Retrying(
            stop=deadline_reached,
            wait=wait_fixed(interval),
            retry=retry_if_result(lambda s: s.status != desired_status),
            sleep=self.sleep,
        )

        try:
            snapshot = retrying(poll)
        except RetryError:
            raise OperationTimeoutError(timeout, last_status) from None

        logger.debug(f"{description} reached {desired_status} after {polls} poll(s)")

        if snapshot.errors:
            for err in snapshot.errors:
                self.reporter.report(ReportLevel.ERROR, f"{err.code}: {err.message}")
            name = getattr(snapshot, "name", description)
            raise OperationError(name, snapshot.errors)

        return snapshot

    def await_operation(
        self, fetch_operation: Callable[[], OperationSnapshot], description: str
    ) -> OperationSnapshot:
        """Waits for a zone Operation to reach DONE and fails on its error list."""
        return self.await_completion(
            fetch_operation, OperationStatus.DONE.value, description=description
        )
