"""
End‑to‑end runs of ``orchestrator.run`` against in‑process targets.

1. Two blank‑line separated objects, 10 ms target → 2 entries, avg ≈ 10 ms.
2. One object plus a malformed line → 1 dispatched, count 1.
3. Concurrency 1, target always times out → 0 entries, run completes, avg 0.
4. Empty file → abort before any HTTP call, previous log untouched.
"""

import logging
import threading
import time

import httpx
import pytest
from fastapi.testclient import TestClient

from loaddriver import orchestrator
from loaddriver.config import RunConfig
from loaddriver.errors import EmptyPayloadSet, SourceReadError
from loaddriver.stub_api import app

BASE = "http://target.test/"


def _config(tmp_path, payload_text, **overrides):
    payload = tmp_path / "payload.txt"
    payload.write_text(payload_text)
    settings = dict(
        payload_path=payload,
        base_url=BASE,
        concurrency=5,
        output_path=tmp_path / "responses.txt",
    )
    settings.update(overrides)
    return RunConfig.build(**settings)


@pytest.mark.timeout(60)
def test_two_payloads_ten_ms_target(tmp_path):
    calls = []

    def handler(request):
        calls.append(str(request.url))
        time.sleep(0.01)
        return httpx.Response(200, content=b'{"ok":true}', headers={"Content-Type": "application/json"})

    config = _config(tmp_path, '{"a":1}\n\n{"b":2}\n')
    with httpx.Client(transport=httpx.MockTransport(handler)) as client:
        report = orchestrator.run(config, client=client)

    assert calls == ["http://target.test/api/find-service"] * 2
    assert report.dispatched == 2
    assert report.metrics.count == 2
    assert 0.01 <= report.metrics.average_latency < 1.0
    assert report.elapsed >= 0.01

    log = config.output_path.read_text(encoding="utf-8")
    assert log.count("---\n") == 2
    assert 'Request: {"a":1}' in log and 'Request: {"b":2}' in log
    assert log.count('Response: {"ok":true}') == 2


@pytest.mark.timeout(60)
def test_malformed_line_is_not_sent(tmp_path, caplog):
    sent = []

    def handler(request):
        sent.append(request.content)
        return httpx.Response(200, json={"ok": True})

    config = _config(tmp_path, '{"a":1}\nnot-json\n')
    with caplog.at_level(logging.WARNING):
        with httpx.Client(transport=httpx.MockTransport(handler)) as client:
            report = orchestrator.run(config, client=client)

    assert sent == [b'{"a":1}']
    assert report.dispatched == 1
    assert report.metrics.count == 1
    assert "Invalid JSON skipped: not-json" in caplog.text


@pytest.mark.timeout(60)
def test_always_timing_out_target(tmp_path, caplog):
    def handler(request):
        raise httpx.ReadTimeout("timed out", request=request)

    payload = "\n".join(f'{{"n":{i}}}' for i in range(5))
    config = _config(tmp_path, payload, concurrency=1)
    with caplog.at_level(logging.WARNING):
        with httpx.Client(transport=httpx.MockTransport(handler)) as client:
            report = orchestrator.run(config, client=client)

    assert report.dispatched == 5
    assert report.metrics.count == 0
    assert report.metrics.failed == 5
    assert report.metrics.average_latency == 0.0
    assert not config.output_path.exists()
    assert caplog.text.count("post error") == 5


def test_empty_file_aborts_before_dispatch(tmp_path):
    previous = tmp_path / "responses.txt"
    previous.write_text("---\nRequest: {}\n\n")

    def handler(request):  # pragma: no cover - must never run
        raise AssertionError("no request expected")

    config = _config(tmp_path, "")
    with httpx.Client(transport=httpx.MockTransport(handler)) as client:
        with pytest.raises(EmptyPayloadSet):
            orchestrator.run(config, client=client)

    assert previous.read_text() == "---\nRequest: {}\n\n"


def test_unreadable_source_is_fatal(tmp_path):
    config = _config(tmp_path, "{}", payload_path=tmp_path / "nope.txt")
    with pytest.raises(SourceReadError):
        orchestrator.run(config)


@pytest.mark.timeout(60)
def test_small_queue_still_delivers_everything(tmp_path):
    lock = threading.Lock()
    bodies = []

    def handler(request):
        with lock:
            bodies.append(request.content.decode())
        return httpx.Response(200, text="ok")

    payloads = [f'{{"n":{i}}}' for i in range(30)]
    config = _config(tmp_path, "\n\n".join(payloads), concurrency=4, queue_size=2)
    with httpx.Client(transport=httpx.MockTransport(handler)) as client:
        report = orchestrator.run(config, client=client)

    assert sorted(bodies) == sorted(payloads)
    assert report.metrics.count == 30


@pytest.mark.timeout(60)
def test_run_against_stub_app(tmp_path):
    """The FastAPI stub answers every payload with 200 ``{"ok": true}``."""
    config = _config(tmp_path, '{"a":1}\n{"b":2}\n{"c":3}\n', base_url="http://testserver", concurrency=2)
    report = orchestrator.run(config, client=TestClient(app))

    assert report.metrics.count == 3
    log = config.output_path.read_text(encoding="utf-8")
    assert log.count("Status: 200") == 3
