"""
Run orchestration: ``INIT → DISPATCH → AWAIT → REPORT``.

Fatal errors (:class:`~loaddriver.errors.ConfigError`,
:class:`~loaddriver.errors.SourceReadError`,
:class:`~loaddriver.errors.EmptyPayloadSet`) surface during *INIT*, before any
request is sent and before the previous result log is cleared.
"""

from __future__ import annotations

import logging
import time
from enum import Enum
from typing import List, Optional

import httpx

from loaddriver.config import RunConfig
from loaddriver.job_queue import JobQueue
from loaddriver.loader import read_payloads
from loaddriver.model import Job, RunReport
from loaddriver.recorder import Recorder
from loaddriver.worker import WorkerPool

logger = logging.getLogger(__name__)


class Phase(str, Enum):
    INIT = "init"
    DISPATCH = "dispatch"
    AWAIT = "await"
    REPORT = "report"


def _enter(phase: Phase) -> None:
    logger.debug("Entering %s phase", phase.value)


def prepare(config: RunConfig) -> List[str]:
    """*INIT*: load the payloads; raises before anything is sent or deleted."""
    _enter(Phase.INIT)
    return read_payloads(config.payload_path)


def dispatch(
    config: RunConfig,
    payloads: List[str],
    client: httpx.Client,
    recorder: Recorder,
) -> WorkerPool:
    """*DISPATCH*: start the pool, enqueue every payload in order, close the queue."""
    _enter(Phase.DISPATCH)
    jobs = JobQueue(maxsize=config.queue_size or len(payloads))
    pool = WorkerPool(client, config.target_url, jobs, recorder, size=config.concurrency)
    pool.run()
    try:
        for index, body in enumerate(payloads):
            jobs.put(Job(index=index, body=body))
    finally:
        jobs.close()
    return pool


def run(config: RunConfig, client: Optional[httpx.Client] = None) -> RunReport:
    """Execute one full load run and return its :class:`RunReport`.

    When *client* is omitted a private :class:`httpx.Client` with
    ``config.timeout`` is created and closed after the pool has finished.
    """
    payloads = prepare(config)
    recorder = Recorder(config.output_path)
    recorder.reset()
    logger.info(
        "Sending %d payloads to %s (concurrency=%d)",
        len(payloads), config.target_url, config.concurrency,
    )

    owns_client = client is None
    if client is None:
        client = httpx.Client(timeout=config.timeout)

    started = time.perf_counter()
    try:
        pool = dispatch(config, payloads, client, recorder)
        _enter(Phase.AWAIT)
        pool.join()
    finally:
        if owns_client:
            client.close()
    elapsed = time.perf_counter() - started

    _enter(Phase.REPORT)
    return RunReport(
        target_url=config.target_url,
        dispatched=len(payloads),
        metrics=recorder.snapshot(),
        elapsed=elapsed,
        output_path=config.output_path,
    )
