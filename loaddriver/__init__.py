"""
loaddriver package initialization.

Bounded‑concurrency HTTP load driver: reads JSON payloads from a file, POSTs
them through a fixed‑size worker pool and reports latency statistics.
"""

__version__ = "0.1.0"
