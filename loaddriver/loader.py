"""
Payload loader.

Behaviour
~~~~~~~~~
* The file is read as raw bytes and split into blank-line-delimited blocks.
* Fewer than two blocks → split on individual non-blank lines instead, unless
  the single block is one valid (e.g. pretty-printed) JSON document.
* Every candidate must decode as UTF-8 and parse as JSON; invalid ones are
  logged and dropped one by one.
* Nothing valid left → :class:`~loaddriver.errors.EmptyPayloadSet`.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import List, Union

from loaddriver.errors import EmptyPayloadSet, PayloadValidationSkip, SourceReadError

logger = logging.getLogger(__name__)

Candidate = Union[str, bytes]


# Helper functions

def _blocks(data: bytes) -> List[bytes]:
    return [b.strip() for b in data.split(b"\n\n") if b.strip()]


def _lines(data: bytes) -> List[bytes]:
    return [line.strip() for line in data.splitlines() if line.strip()]


def _parse(candidate: Candidate) -> str:
    """Return *candidate* as text; raise :class:`PayloadValidationSkip` unless it is JSON."""
    if isinstance(candidate, bytes):
        try:
            text = candidate.decode("utf-8")
        except UnicodeDecodeError as exc:
            shown = candidate.decode("utf-8", errors="replace")
            raise PayloadValidationSkip(shown, f"not UTF-8: {exc}") from exc
    else:
        text = candidate
    try:
        json.loads(text)
    except ValueError as exc:
        raise PayloadValidationSkip(text, str(exc)) from exc
    return text


def split_candidates(data: Candidate) -> List[bytes]:
    """Return the trimmed, non-empty candidate payloads found in *data*."""
    if isinstance(data, str):
        data = data.encode("utf-8")
    data = data.replace(b"\r\n", b"\n")
    blocks = _blocks(data)
    if len(blocks) >= 2:
        return blocks
    if len(blocks) == 1 and is_valid_json(blocks[0]):
        return blocks
    return _lines(data)


# Public API

def is_valid_json(candidate: Candidate) -> bool:
    """Return **True** iff *candidate* is well-formed (UTF-8) JSON."""
    try:
        _parse(candidate)
    except PayloadValidationSkip:
        return False
    return True


def read_payloads(path: Union[str, Path]) -> List[str]:
    """Load, split and validate the payloads stored at *path*, preserving order."""
    try:
        data = Path(path).read_bytes()
    except OSError as exc:
        raise SourceReadError(f"cannot read payload file {path}: {exc}") from exc

    valid: List[str] = []
    for candidate in split_candidates(data):
        try:
            valid.append(_parse(candidate))
        except PayloadValidationSkip as skip:
            logger.warning("%s", skip)

    if not valid:
        raise EmptyPayloadSet(f"no valid JSON payloads found in {path}")
    return valid
