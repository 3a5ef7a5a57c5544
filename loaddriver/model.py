"""
Core data-model classes for the load driver.

Includes:
* **Job** – one request body, consumed exactly once.
* **Outcome** – the result of one completed round trip.
* **AggregateMetrics** – run-level latency totals, owned by the Recorder.
* **RunReport** – what the orchestrator hands back after a run.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict


class Job(BaseModel):
    model_config = ConfigDict(frozen=True)

    index: int
    body: str


class Outcome(BaseModel):
    """Result of one round trip; immutable once a worker created it."""

    model_config = ConfigDict(frozen=True)

    job: Job
    response_body: str
    status_code: int
    latency: float  # seconds
    worker_id: int


class AggregateMetrics(BaseModel):
    """Running totals. Only :class:`~loaddriver.recorder.Recorder` mutates these."""

    total_latency: float = 0.0
    count: int = 0
    min_latency: Optional[float] = None
    max_latency: Optional[float] = None
    failed: int = 0  # jobs that never produced an Outcome
    write_failures: int = 0  # Outcomes the result log rejected

    @property
    def average_latency(self) -> float:
        if self.count == 0:
            return 0.0
        return self.total_latency / self.count

    def add(self, latency: float) -> None:
        self.total_latency += latency
        self.count += 1
        if self.min_latency is None or latency < self.min_latency:
            self.min_latency = latency
        if self.max_latency is None or latency > self.max_latency:
            self.max_latency = latency


class RunReport(BaseModel):
    model_config = ConfigDict(frozen=True)

    target_url: str
    dispatched: int
    metrics: AggregateMetrics
    elapsed: float  # wall-clock seconds for the whole run
    output_path: Path
