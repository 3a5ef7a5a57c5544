"""
Minimal FastAPI stand‑in for a ``/api/find-service`` target.

Useful for smoke‑testing the driver locally, e.g.::

    uvicorn loaddriver.stub_api:app --port 18020
    loadctl payloads.txt http://127.0.0.1:18020
"""

from __future__ import annotations

import json
from asyncio import sleep

from fastapi import FastAPI, HTTPException, Query, Request

from loaddriver.config import API_ROUTE

app = FastAPI(title="find-service stub")


@app.post(API_ROUTE)
async def find_service(request: Request, delay_ms: int = Query(0, ge=0)) -> dict:
    """Accept any JSON document and answer ``{"ok": true}``."""
    raw = await request.body()
    try:
        json.loads(raw)
    except ValueError:
        raise HTTPException(status_code=422, detail="body is not valid JSON")
    if delay_ms:
        await sleep(delay_ms / 1000)
    return {"ok": True}
