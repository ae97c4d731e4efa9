"""
Terminal overlay – the host side of a shell session.

Owns what the dispatcher deliberately does not: the scrollback buffer,
command history, the prompt, open/close lifecycle and the lockout-alert
timer.  Events returned by the dispatcher are applied here and then
forwarded to the optional `on_event` callback for map/audio/achievement
collaborators.
"""
import logging
import time
from typing import Callable, Optional

from core.command_engine import CommandDispatcher, MASKED
from core.commands import DispatchResult
from core.events import Event
from core.session import Session, new_session
from core.virtual_fs import VirtualFileSystem
from config.settings import HISTORY_SIZE, SCROLLBACK_SIZE

_log = logging.getLogger("system")


class TerminalOverlay:
    """One on-screen terminal bound to one Session."""

    def __init__(
        self,
        dispatcher: CommandDispatcher,
        vfs: VirtualFileSystem,
        origin: str = "local",
        on_event: Optional[Callable[[Event], None]] = None,
        history_size: int = HISTORY_SIZE,
        scrollback_size: int = SCROLLBACK_SIZE,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.dispatcher      = dispatcher
        self.vfs             = vfs
        self.session: Session = new_session(origin)
        self.on_event        = on_event
        self.history_size    = history_size
        self.scrollback_size = scrollback_size
        self._clock          = clock
        self.is_open         = False
        self.alert_until     = 0.0
        self.lines: list[str] = self._fresh_screen()

    @property
    def profile(self):
        return self.dispatcher.profile

    def _fresh_screen(self) -> list[str]:
        return [self.profile.banner, ""]

    # ── Lifecycle ─────────────────────────────────────────────────────────────

    def open(self):
        self.is_open = True

    def hide(self):
        """Hide the overlay but keep the session (e.g. while the map flies)."""
        self.is_open = False

    def close(self):
        """Close the overlay and discard its session."""
        self.is_open = False
        self.session.reset()
        self.lines = self._fresh_screen()

    def toggle(self):
        if self.is_open:
            self.close()
        else:
            self.open()

    # ── Rendering ─────────────────────────────────────────────────────────────

    def prompt(self) -> str:
        if self.session.awaiting_password:
            return "Password:"
        sigil = "#" if self.session.is_root else "$"
        return f"{self.session.username}@{self.profile.hostname}:{self.session.cwd}{sigil}"

    @property
    def alert_active(self) -> bool:
        return self._clock() < self.alert_until

    def append(self, *lines: str):
        self.lines.extend(lines)
        if len(self.lines) > self.scrollback_size:
            del self.lines[:-self.scrollback_size]

    # ── Input ─────────────────────────────────────────────────────────────────

    def submit(self, raw_line: str) -> DispatchResult:
        secret = self.session.awaiting_password
        shown  = MASKED if secret and raw_line.strip() else raw_line
        self.append(f"{self.prompt()} {shown}".rstrip())
        if raw_line.strip() and not secret:
            self.session.record(raw_line.strip(), self.history_size)

        result = self.dispatcher.dispatch(raw_line, self.session, self.vfs)
        self.append(*result.output_lines)
        for ev in result.events:
            self._apply(ev)
        return result

    def _apply(self, ev: Event):
        if ev.kind == "clear":
            self.lines = self._fresh_screen()
        elif ev.kind == "close":
            self.hide()
        elif ev.kind == "alert":
            self.alert_until = self._clock() + ev.duration_ms / 1000.0
        if self.on_event is not None:
            try:
                self.on_event(ev)
            except Exception:
                _log.exception("event handler failed for %s", ev.kind)


def ends_session(events: list[Event]) -> bool:
    """`close` on its own ends the session; alongside map events it only hides."""
    kinds = {e.kind for e in events}
    return "close" in kinds and not kinds & {"navigate", "uxv"}
