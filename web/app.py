"""
Terminal Dashboard  ·  FastAPI + Server-Sent Events
====================================================
Started by main.py via:
    python main.py --dashboard

Browser overlays drive their terminal through the session API; the
/events stream mirrors audit records (commands, auth attempts, session
lifecycle) from core.audit.event_queue, optionally for one session only.
"""

from __future__ import annotations

import asyncio
import json
import queue as _queue
import threading
import time
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import StreamingResponse
from pydantic import BaseModel

from config.settings import (
    COMPANIES, DEFAULT_PROFILE, DASHBOARD_HOST, DASHBOARD_PORT,
    WEB_SESSION_TTL, WEB_MAX_SESSIONS,
)
from core import audit
from core.builtin_commands import RESTRICTED_READ
from core.command_engine import CommandDispatcher
from core.commands import REGISTRY
from core.events import to_dict
from core.paths import canonicalize, is_within
from core.profiles import PROFILES, get_profile
from core.terminal import TerminalOverlay, ends_session
from core.virtual_fs import build_vfs

# ── App setup ─────────────────────────────────────────────────────────────────
app = FastAPI(title="Mission Control Terminal", docs_url=None, redoc_url=None)

vfs = build_vfs(companies=COMPANIES)
dispatchers = {
    name: CommandDispatcher(profile=p, companies=COMPANIES) for name, p in PROFILES.items()
}

# ── Session table ─────────────────────────────────────────────────────────────
# session_id → overlay, and session_id → last request time (_clock seconds)
_overlays:  dict[str, TerminalOverlay] = {}
_last_used: dict[str, float] = {}
_overlays_lock = threading.Lock()
_clock = time.monotonic


class NewSession(BaseModel):
    profile: str = DEFAULT_PROFILE
    origin: str = "web"


class CommandLine(BaseModel):
    line: str


def _drop(session_id: str) -> Optional[TerminalOverlay]:
    """Remove a session from the table (caller holds the lock)."""
    _last_used.pop(session_id, None)
    return _overlays.pop(session_id, None)


def _evict(ttl: Optional[float] = None,
           limit: Optional[int] = None) -> list[tuple[str, TerminalOverlay, str]]:
    """
    Expire idle sessions, then make room for one more.

    Defaults to WEB_SESSION_TTL / WEB_MAX_SESSIONS.  Returns
    (session_id, overlay, reason) for every session dropped.
    """
    ttl = WEB_SESSION_TTL if ttl is None else ttl
    limit = WEB_MAX_SESSIONS if limit is None else limit
    now = _clock()
    dropped = []
    with _overlays_lock:
        for sid in [s for s, t in _last_used.items() if now - t > ttl]:
            dropped.append((sid, _drop(sid), "expired"))
        while _overlays and len(_overlays) >= limit:
            sid = min(_last_used, key=_last_used.get)
            dropped.append((sid, _drop(sid), "evicted"))
    for sid, overlay, reason in dropped:
        overlay.close()
        audit.log_session_event("CLOSE", overlay.session.origin, session_id=sid, reason=reason)
    return dropped


def _get_overlay(session_id: str) -> TerminalOverlay:
    with _overlays_lock:
        overlay = _overlays.get(session_id)
        if overlay is not None:
            _last_used[session_id] = _clock()
    if overlay is None:
        raise HTTPException(status_code=404, detail="unknown session")
    return overlay


def _view(overlay: TerminalOverlay) -> dict:
    return {
        "session_id":   overlay.session.session_id,
        "profile":      overlay.profile.name,
        "prompt":       overlay.prompt(),
        "is_open":      overlay.is_open,
        "alert_active": overlay.alert_active,
    }


# ── SSE client registry ───────────────────────────────────────────────────────
_clients: list[_queue.Queue] = []
_clients_lock = threading.Lock()
_fanout_started = threading.Event()

HEARTBEAT_TICKS = 150           # 150 × 100 ms idle polls ≈ 15 s


def _fan_out(ev: dict):
    """Copy one audit record into every client queue; full queues are dropped."""
    with _clients_lock:
        for q in list(_clients):
            try:
                q.put_nowait(ev)
            except _queue.Full:
                _clients.remove(q)


def _fanout_worker():
    """Background thread: drains the shared audit queue forever."""
    eq = audit.event_queue
    while True:
        try:
            ev = eq.get(timeout=1)
        except _queue.Empty:
            continue
        _fan_out(ev)


def _ensure_fanout():
    if not _fanout_started.is_set():
        _fanout_started.set()
        threading.Thread(target=_fanout_worker, daemon=True, name="sse-fanout").start()


def _frame(payload: dict) -> str:
    return f"data: {json.dumps(payload)}\n\n"


# ══════════════════════════════════════════════════════════════════════════════
# SESSION API
# ══════════════════════════════════════════════════════════════════════════════

@app.post("/api/sessions")
async def create_session(body: Optional[NewSession] = None):
    body = body or NewSession()
    try:
        profile = get_profile(body.profile)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    _evict()
    overlay = TerminalOverlay(dispatchers[profile.name], vfs, origin=body.origin)
    overlay.open()
    sid = overlay.session.session_id
    with _overlays_lock:
        _overlays[sid] = overlay
        _last_used[sid] = _clock()
    audit.log_session_event("OPEN", body.origin, session_id=sid, profile=profile.name)
    return {**_view(overlay), "lines": list(overlay.lines)}


@app.post("/api/sessions/{session_id}/commands")
async def run_command(session_id: str, body: CommandLine):
    overlay = _get_overlay(session_id)
    result = overlay.submit(body.line)
    view = _view(overlay)
    if ends_session(result.events):
        with _overlays_lock:
            _drop(session_id)
        overlay.close()
        audit.log_session_event("CLOSE", overlay.session.origin,
                                session_id=session_id, reason="exit")
        view["is_open"] = False
    return {
        **view,
        "output": result.output_lines,
        "events": [to_dict(e) for e in result.events],
    }


@app.get("/api/sessions/{session_id}")
async def get_session(session_id: str):
    overlay = _get_overlay(session_id)
    return {**_view(overlay), "state": overlay.session.snapshot(), "lines": list(overlay.lines)}


@app.delete("/api/sessions/{session_id}")
async def close_session(session_id: str):
    with _overlays_lock:
        overlay = _drop(session_id)
    if overlay is None:
        raise HTTPException(status_code=404, detail="unknown session")
    overlay.close()
    audit.log_session_event("CLOSE", overlay.session.origin,
                            session_id=session_id, reason="deleted")
    return {"session_id": session_id, "closed": True}


# ══════════════════════════════════════════════════════════════════════════════
# REFERENCE API
# ══════════════════════════════════════════════════════════════════════════════

@app.get("/api/commands")
async def list_commands():
    return [
        {"name": c.name, "usage": c.usage, "description": c.description,
         "aliases": list(c.aliases), "root_only": c.root_only}
        for c in REGISTRY.visible()
    ]


@app.get("/api/fs")
async def browse(path: str = "/"):
    """Guest view of the filesystem: a listing or a file's content."""
    path = canonicalize(path)
    if any(is_within(path, r) for r in RESTRICTED_READ):
        raise HTTPException(status_code=403, detail="permission denied")
    entries = vfs.list_directory(path)
    if entries is not None:
        return {"path": path, "kind": "dir", "entries": entries}
    content = vfs.read_file(path)
    if content is None:
        raise HTTPException(status_code=404, detail="no such file or directory")
    return {"path": path, "kind": "file", "content": content}


# ══════════════════════════════════════════════════════════════════════════════
# SERVER-SENT EVENTS
# ══════════════════════════════════════════════════════════════════════════════

async def event_stream(
    request,
    client_q: _queue.Queue,
    session_id: Optional[str] = None,
    limit: int = 0,
) -> AsyncGenerator[str, None]:
    """
    Yield SSE frames from `client_q` until the client disconnects.

    Parameters
    ----------
    request    : object with an async ``is_disconnected()``
    client_q   : this client's queue, registered in ``_clients``
    session_id : only forward records carrying this session id
    limit      : stop after this many records (0 = unbounded)
    """
    yield _frame({"event_type": "connected", "session_id": session_id})
    sent = idle = 0
    try:
        while not await request.is_disconnected():
            try:
                ev = client_q.get_nowait()
            except _queue.Empty:
                await asyncio.sleep(0.1)
                idle += 1
                if idle >= HEARTBEAT_TICKS:
                    yield _frame({"event_type": "heartbeat"})
                    idle = 0
                continue

            idle = 0
            if session_id and ev.get("session_id") != session_id:
                continue
            yield _frame(ev)
            sent += 1
            if limit and sent >= limit:
                break
    finally:
        with _clients_lock:
            if client_q in _clients:
                _clients.remove(client_q)


@app.get("/events")
async def sse_stream(request: Request, session_id: Optional[str] = None, limit: int = 0):
    _ensure_fanout()
    client_q: _queue.Queue = _queue.Queue(maxsize=500)
    with _clients_lock:
        _clients.append(client_q)

    return StreamingResponse(
        event_stream(request, client_q, session_id, max(limit, 0)),
        media_type="text/event-stream",
        headers={
            "Cache-Control":     "no-cache",
            "X-Accel-Buffering": "no",
            "Connection":        "keep-alive",
        },
    )


# ══════════════════════════════════════════════════════════════════════════════
# ENTRY POINT  (called from main.py, optionally in a daemon thread)
# ══════════════════════════════════════════════════════════════════════════════

def start_dashboard(host: str = DASHBOARD_HOST, port: int = DASHBOARD_PORT):
    import uvicorn
    print(f"[*] Dashboard  → http://{host}:{port}")
    uvicorn.run(app, host=host, port=port, log_level="warning", use_colors=False)


if __name__ == "__main__":
    start_dashboard()
