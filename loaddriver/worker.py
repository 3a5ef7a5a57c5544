"""
Fixed-size worker pool that drains a :class:`~loaddriver.job_queue.JobQueue`.

Each worker thread loops over the queue and, per job, POSTs the body to the
target, times the round trip and hands the :class:`~loaddriver.model.Outcome`
to the shared :class:`~loaddriver.recorder.Recorder`. A failing job is logged
and skipped; it never stops its worker or the pool.
"""

from __future__ import annotations

import logging
import time
from concurrent.futures import Future, ThreadPoolExecutor, wait
from typing import List, Optional

import httpx

from loaddriver.config import CONTENT_TYPE, DEFAULT_CONCURRENCY
from loaddriver.errors import RequestBuildError, TransportError
from loaddriver.job_queue import JobQueue
from loaddriver.model import Job, Outcome
from loaddriver.recorder import Recorder

logger = logging.getLogger(__name__)


class WorkerPool:
    def __init__(
        self,
        client: httpx.Client,
        url: str,
        jobs: JobQueue,
        recorder: Recorder,
        size: int = DEFAULT_CONCURRENCY,
    ) -> None:
        if size < 1:
            raise ValueError("pool size must be >= 1")
        self.client = client
        self.url = url
        self.jobs = jobs
        self.recorder = recorder
        self.size = size
        self._executor: Optional[ThreadPoolExecutor] = None
        self._futures: List[Future] = []

    # Lifecycle

    def run(self) -> None:
        """Start ``size`` workers; they block on the queue until it is closed."""
        if self._executor is not None:
            raise RuntimeError("worker pool already started")
        self._executor = ThreadPoolExecutor(max_workers=self.size, thread_name_prefix="worker")
        self._futures = [
            self._executor.submit(self._work, worker_id)
            for worker_id in range(1, self.size + 1)
        ]
        logger.debug("Started %d workers against %s", self.size, self.url)

    def join(self) -> None:
        """Wait until every worker has drained the closed queue and exited."""
        if self._executor is None:
            return
        wait(self._futures)
        self._executor.shutdown(wait=True)
        for future in self._futures:
            exc = future.exception()
            if exc is not None:  # pragma: no cover - _work contains per-job errors
                logger.error("Worker terminated abnormally: %s", exc)

    # Worker loop

    def _work(self, worker_id: int) -> None:
        for job in self.jobs:
            try:
                self.dispatch(worker_id, job)
            except Exception:
                self.recorder.record_failure()
                logger.exception(
                    "[w%d] %s unexpected error on job %d", worker_id, self.url, job.index
                )
        logger.debug("[w%d] queue drained, exiting", worker_id)

    def dispatch(self, worker_id: int, job: Job) -> Optional[Outcome]:
        """Send one job; return its Outcome, or ``None`` when the job was skipped."""
        try:
            request = self._build(job)
        except RequestBuildError as exc:
            self.recorder.record_failure()
            logger.warning("[w%d] %s request create error: %s", worker_id, self.url, exc)
            return None

        try:
            outcome = self._send(worker_id, job, request)
        except TransportError as exc:
            self.recorder.record_failure()
            logger.warning("[w%d] %s post error (%.2fs): %s", worker_id, self.url, exc.elapsed, exc)
            return None

        logger.info(
            "[w%d] %s -> %d (%.2fs)", worker_id, self.url, outcome.status_code, outcome.latency
        )
        self.recorder.record(outcome)
        return outcome

    # Helpers

    def _build(self, job: Job) -> httpx.Request:
        try:
            return self.client.build_request(
                "POST",
                self.url,
                content=job.body.encode("utf-8"),
                headers={"Content-Type": CONTENT_TYPE},
            )
        except (httpx.InvalidURL, ValueError, TypeError) as exc:
            raise RequestBuildError(str(exc)) from exc

    def _send(self, worker_id: int, job: Job, request: httpx.Request) -> Outcome:
        start = time.perf_counter()
        try:
            response = self.client.send(request, stream=True)
        except httpx.HTTPError as exc:
            elapsed = time.perf_counter() - start
            raise TransportError(f"{type(exc).__name__}: {exc}", elapsed) from exc

        # Body read is best-effort: a broken body still yields an Outcome.
        try:
            response.read()
            body = response.text
        except httpx.HTTPError as exc:
            logger.warning("[w%d] %s response body read error: %s", worker_id, self.url, exc)
            body = ""
        finally:
            response.close()
        elapsed = time.perf_counter() - start

        return Outcome(
            job=job,
            response_body=body,
            status_code=response.status_code,
            latency=elapsed,
            worker_id=worker_id,
        )
