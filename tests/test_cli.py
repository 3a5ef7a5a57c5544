"""
CLI integration tests: run ``python -m loaddriver.cli`` as a subprocess and
check exit codes for the paths that never reach the network.
"""

import subprocess
import sys


def _loadctl(*args):
    cmd = [sys.executable, "-m", "loaddriver.cli", *map(str, args)]
    return subprocess.run(cmd, capture_output=True, text=True)


def test_cli_usage_on_missing_arguments():
    """Expect a usage message and a non-zero exit without a base URL."""
    result = _loadctl("payload.txt")
    assert result.returncode == 2
    assert "Usage" in result.stderr


def test_cli_empty_payload_file_aborts(tmp_path):
    """Empty file → exit 1 and the result log is never created."""
    payload = tmp_path / "payload.txt"
    payload.write_text("")
    output = tmp_path / "responses.txt"

    result = _loadctl(payload, "http://127.0.0.1:9", "--output", output)
    assert result.returncode == 1
    assert "no valid JSON payloads" in result.stderr
    assert not output.exists()


def test_cli_rejects_zero_concurrency(tmp_path):
    payload = tmp_path / "payload.txt"
    payload.write_text('{"a":1}\n')

    result = _loadctl(payload, "http://127.0.0.1:9", 0)
    assert result.returncode == 1
    assert "concurrency" in result.stderr


def test_cli_dry_run(tmp_path):
    """Dry run validates the file and reports the normalised target."""
    payload = tmp_path / "payload.txt"
    payload.write_text('{"a":1}\n\n{"b":2}\n')

    result = _loadctl(payload, "http://127.0.0.1:9/", "--dry-run")
    assert result.returncode == 0
    assert "2 valid payloads for http://127.0.0.1:9/api/find-service" in result.stdout
