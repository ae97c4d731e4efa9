"""
Terminal session state.

One `Session` per open overlay.  The dispatcher mutates it in place; the
host creates it on open and resets it on close.  Nothing here is persisted.
"""
from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from enum import Enum


class AuthState(str, Enum):
    GUEST             = "guest"
    AWAITING_PASSWORD = "awaitingPassword"
    ROOT              = "root"


PUZZLE_INACTIVE = 0
PUZZLE_PENDING  = 1


def _new_id() -> str:
    return uuid.uuid4().hex[:12]


@dataclass
class Session:
    cwd:             str       = "/"
    auth_state:      AuthState = AuthState.GUEST
    failed_attempts: int       = 0
    puzzle_stage:    int       = PUZZLE_INACTIVE
    history:         list[str] = field(default_factory=list)
    session_id:      str       = field(default_factory=_new_id)
    origin:          str       = "local"

    @property
    def is_root(self) -> bool:
        return self.auth_state is AuthState.ROOT

    @property
    def awaiting_password(self) -> bool:
        return self.auth_state is AuthState.AWAITING_PASSWORD

    @property
    def username(self) -> str:
        return "root" if self.is_root else "guest"

    def record(self, line: str, limit: int = 0):
        """Append a submitted line to history, keeping at most `limit` entries."""
        self.history.append(line)
        if limit and len(self.history) > limit:
            del self.history[:-limit]

    def reset(self):
        """Restore defaults in place; the id and origin survive."""
        self.cwd             = "/"
        self.auth_state      = AuthState.GUEST
        self.failed_attempts = 0
        self.puzzle_stage    = PUZZLE_INACTIVE
        self.history         = []

    def snapshot(self) -> dict:
        return {
            "session_id":      self.session_id,
            "origin":          self.origin,
            "cwd":             self.cwd,
            "auth_state":      self.auth_state.value,
            "failed_attempts": self.failed_attempts,
            "puzzle_stage":    self.puzzle_stage,
            "history":         list(self.history),
        }


def new_session(origin: str = "local") -> Session:
    """Fresh session with default state."""
    return Session(origin=origin)
