from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, TypeVar

from .errors import LayerError, LayerTimeoutError, PrerequisiteError


LOGGER = logging.getLogger(__name__)
T = TypeVar("T")


class JobQueue:
    """In-flight prerequisites that must all settle before a layer draws brushes.

    Jobs are scheduled as soon as they are submitted, so `submit` must be
    called with an event loop running.
    """

    def __init__(self) -> None:
        self._jobs: list[asyncio.Future[Any]] = []

    def __len__(self) -> int:
        return len(self._jobs)

    @property
    def pending(self) -> int:
        return sum(1 for job in self._jobs if not job.done())

    def submit(self, job: Awaitable[T]) -> asyncio.Future[T]:
        future = asyncio.ensure_future(job)
        self._jobs.append(future)
        LOGGER.debug("Job submitted; total=%d pending=%d", len(self._jobs), self.pending)
        return future

    async def join(self, timeout: float | None = None) -> None:
        """Wait for every submitted job, including ones submitted while waiting.

        The first failure (in submission order) cancels whatever is still
        pending and is re-raised; `timeout` bounds the whole wait.
        """
        loop = asyncio.get_running_loop()
        deadline = None if timeout is None else loop.time() + timeout
        joined = 0
        while joined < len(self._jobs):
            batch = self._jobs[joined:]
            joined = len(self._jobs)
            remaining = None if deadline is None else max(0.0, deadline - loop.time())
            _, pending = await asyncio.wait(batch, timeout=remaining, return_when=asyncio.FIRST_EXCEPTION)
            error = _first_error(batch)
            if error is not None:
                cancelled = self._cancel_pending()
                LOGGER.warning("Job barrier failed (%s); cancelled %d pending job(s)", error, cancelled)
                if isinstance(error, LayerError):
                    raise error
                raise PrerequisiteError(f"prerequisite job failed: {error}") from error
            if pending:
                cancelled = self._cancel_pending()
                LOGGER.warning("Job barrier timed out after %.3fs; cancelled %d pending job(s)", timeout, cancelled)
                raise LayerTimeoutError(f"jobs did not settle within {timeout}s")

    def _cancel_pending(self) -> int:
        cancelled = 0
        for job in self._jobs:
            if not job.done():
                job.cancel()
                cancelled += 1
        return cancelled


def _first_error(jobs: list[asyncio.Future[Any]]) -> BaseException | None:
    first: BaseException | None = None
    for job in jobs:
        if not job.done():
            continue
        if job.cancelled():
            error: BaseException | None = PrerequisiteError("prerequisite job was cancelled")
        else:
            error = job.exception()
        if first is None and error is not None:
            first = error
    return first
