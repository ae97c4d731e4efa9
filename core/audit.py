"""
Audit trail for terminal activity.

· JSON-per-line rotating logs: commands / auth / system
· Bounded in-memory event_queue consumed by the web SSE feed
· Loggers are created lazily by configure_logging(); importing this
  module never touches the filesystem
"""

from __future__ import annotations

import datetime
import json
import logging
import os
from logging.handlers import RotatingFileHandler
from queue import Queue, Full, Empty

from config.settings import (
    LOG_DIR, COMMAND_LOG, AUTH_LOG, SYSTEM_LOG, LOG_MAX_BYTES, LOG_BACKUP_COUNT,
)

cmd_logger  = logging.getLogger("commands")
auth_logger = logging.getLogger("auth")
sys_logger  = logging.getLogger("system")

# ── global live-feed queue ────────────────────────────────────────────────────
event_queue: Queue = Queue(maxsize=1000)


def now_iso() -> str:
    return datetime.datetime.now().astimezone().isoformat(timespec="seconds")


# ── Logger factory ────────────────────────────────────────────────────────────

def _make_logger(name: str, path: str) -> logging.Logger:
    logger = logging.getLogger(name)
    if any(isinstance(h, RotatingFileHandler) for h in logger.handlers):
        return logger   # already configured
    logger.setLevel(logging.INFO)
    h = RotatingFileHandler(path, maxBytes=LOG_MAX_BYTES, backupCount=LOG_BACKUP_COUNT)
    h.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(h)
    return logger


def configure_logging(log_dir: str = LOG_DIR):
    """Create the log directory and attach rotating handlers (idempotent)."""
    os.makedirs(log_dir, exist_ok=True)
    for name, default in (("commands", COMMAND_LOG),
                          ("auth",     AUTH_LOG),
                          ("system",   SYSTEM_LOG)):
        _make_logger(name, os.path.join(log_dir, os.path.basename(default)))


# ── Event queue ───────────────────────────────────────────────────────────────

def _push(ev: dict):
    try:
        event_queue.put_nowait(ev)
    except Full:
        # drop the oldest record to make room
        try:
            event_queue.get_nowait()
        except Empty:
            pass
        try:
            event_queue.put_nowait(ev)
        except Full:
            pass


def drain(limit: int = 100) -> list[dict]:
    """Pop up to `limit` pending records without blocking."""
    out = []
    while len(out) < limit:
        try:
            out.append(event_queue.get_nowait())
        except Empty:
            break
    return out


# ══════════════════════════════════════════════════════════════════════════════
# PUBLIC API
# ══════════════════════════════════════════════════════════════════════════════

def log_command_event(session_id: str, origin: str, username: str, command: str,
                      output_lines: int = 0, events: list[str] | None = None):
    ev = {
        "timestamp":    now_iso(),
        "event_type":   "command",
        "session_id":   session_id,
        "origin":       origin,
        "username":     username,
        "command":      command,
        "output_lines": output_lines,
        "events":       events or [],
    }
    cmd_logger.info(json.dumps(ev))
    _push(ev)


def log_auth_event(session_id: str, origin: str, success: bool, attempts: int,
                   lockout: bool = False):
    """Record an in-shell password attempt.  The password itself is never logged."""
    ev = {
        "timestamp":  now_iso(),
        "event_type": "auth",
        "session_id": session_id,
        "origin":     origin,
        "success":    success,
        "attempts":   attempts,
        "lockout":    lockout,
    }
    auth_logger.info(json.dumps(ev))
    _push(ev)


def log_transport_auth(source_ip: str, username: str, result: str):
    ev = {
        "timestamp":  now_iso(),
        "event_type": "ssh_auth_attempt",
        "source_ip":  source_ip,
        "username":   username,
        "result":     result,
    }
    auth_logger.info(json.dumps(ev))
    _push(ev)


def log_session_event(event: str, origin: str, **kwargs):
    """Lifecycle record: open / close / connect / disconnect / error."""
    ev = {
        "timestamp":  now_iso(),
        "event_type": f"session_{event.lower()}",
        "origin":     origin,
        **kwargs,
    }
    sys_logger.info(json.dumps(ev))
    _push(ev)
