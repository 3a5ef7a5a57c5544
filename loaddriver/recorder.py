"""
Synchronised sink for round-trip outcomes.

A :class:`Recorder` owns both the append-only result log and the run's
:class:`~loaddriver.model.AggregateMetrics`. Both are updated together under
one lock in :meth:`Recorder.record`, so the log and the counters never drift
apart: ``metrics.count`` always equals the number of entries in the log.
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Union

from loaddriver.config import RESULT_LOG
from loaddriver.errors import RecordWriteError
from loaddriver.model import AggregateMetrics, Outcome

logger = logging.getLogger(__name__)

_ENTRY = "---\nRequest: {request}\nResponse: {response}\nStatus: {status}\nTime: {time}\n\n"


def format_duration(seconds: float) -> str:
    """Render *seconds* as a short human-readable string, e.g. ``10.2ms``."""
    if seconds == 0:
        return "0s"
    # Round before picking the unit so 0.9999996s renders as 1s, not 1000ms.
    for scale, unit in ((1.0, "s"), (1e-3, "ms"), (1e-6, "µs")):
        value = round(seconds / scale, 3)
        if abs(value) >= 1:
            break
    text = f"{value:.3f}".rstrip("0").rstrip(".")
    return f"{text}{unit}"


def format_entry(outcome: Outcome) -> str:
    return _ENTRY.format(
        request=outcome.job.body.strip(),
        response=outcome.response_body.strip(),
        status=outcome.status_code,
        time=format_duration(outcome.latency),
    )


class Recorder:
    """Lock-guarded result log plus aggregate metrics."""

    def __init__(self, path: Union[str, Path] = RESULT_LOG) -> None:
        self.path = Path(path)
        self._lock = threading.Lock()
        self._metrics = AggregateMetrics()

    def reset(self) -> None:
        """Drop any result log left over from a previous run and zero the metrics."""
        with self._lock:
            try:
                self.path.unlink(missing_ok=True)
            except OSError as exc:
                logger.warning("Could not clear previous result log %s: %s", self.path, exc)
            self._metrics = AggregateMetrics()

    def record(self, outcome: Outcome) -> bool:
        """Append *outcome* to the log and count it; return whether it was persisted."""
        entry = format_entry(outcome)
        with self._lock:
            try:
                self._append(entry)
            except RecordWriteError as exc:
                self._metrics.write_failures += 1
                logger.error("%s", exc)
                return False
            self._metrics.add(outcome.latency)
            return True

    def record_failure(self) -> None:
        """Count a job that ended without an Outcome."""
        with self._lock:
            self._metrics.failed += 1

    def snapshot(self) -> AggregateMetrics:
        """Return a copy of the metrics taken under the lock."""
        with self._lock:
            return self._metrics.model_copy()

    def _append(self, entry: str) -> None:
        try:
            with self.path.open("a", encoding="utf-8") as fh:
                fh.write(entry)
        except OSError as exc:
            raise RecordWriteError(f"cannot append to {self.path}: {exc}") from exc
