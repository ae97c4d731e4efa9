"""
Command Engine – the line interpreter behind every terminal overlay.

Key features
------------
* Riddle sub-state: while a riddle is pending every line is an answer
* Password challenge: guest → awaitingPassword → root, 3-strike lockout alert
* Registry dispatch with declared arity and root-only gating
* Handlers are total; nothing raised inside a handler reaches the host
* One JSON audit record per dispatched line
"""

import datetime
import logging
from typing import Callable, Optional, Sequence

from core import audit
from core import builtin_commands, map_commands  # noqa: F401  (register handlers)
from core.commands import REGISTRY, CommandContext, CommandRegistry, DispatchResult
from core.events import AlertEvent, SoundEvent, UnlockEvent
from core.geofences import GEOFENCES, Region
from core.profiles import MAP_PROFILE, ShellProfile
from core.session import AuthState, PUZZLE_INACTIVE, PUZZLE_PENDING, Session
from core.virtual_fs import VirtualFileSystem
from config.settings import COMPANIES

_log = logging.getLogger("system")

MASKED = "********"


def default_clock() -> str:
    return datetime.datetime.now().astimezone().strftime("%a %b %d %Y %H:%M:%S %Z")


class CommandDispatcher:
    """
    Routes raw input lines to command handlers.

    Parameters
    ----------
    profile   : ShellProfile – password, riddle, banner and unlock ids
    regions   : geofences known to `regions` / `goto` / `uxv goto region`
    companies : company names known to `companies` / `hq`
    clock     : callable returning the string printed by `date`
    registry  : CommandRegistry to dispatch against
    """

    def __init__(
        self,
        profile: ShellProfile = MAP_PROFILE,
        regions: Sequence[Region] = GEOFENCES,
        companies: Sequence[str] = (),
        clock: Optional[Callable[[], str]] = None,
        registry: CommandRegistry = REGISTRY,
    ):
        self.profile   = profile
        self.regions   = tuple(regions)
        self.companies = tuple(companies)
        self.clock     = clock or default_clock
        self.registry  = registry

    # ── Entry point ───────────────────────────────────────────────────────────

    def dispatch(self, raw_line: str, session: Session, vfs: VirtualFileSystem) -> DispatchResult:
        line = raw_line.strip()
        was_password = session.awaiting_password
        username = session.username

        if not line:
            result = DispatchResult(output_lines=[""])
        elif session.puzzle_stage == PUZZLE_PENDING:
            result = self._answer_riddle(line, session)
        elif was_password:
            result = self._check_password(line, session)
        else:
            result = self._run_command(line, session, vfs)

        if line:
            audit.log_command_event(
                session.session_id, session.origin, username,
                MASKED if was_password else line,
                output_lines=len(result.output_lines),
                events=[e.kind for e in result.events],
            )
        return result

    # ── Riddle ────────────────────────────────────────────────────────────────

    def _start_riddle(self, session: Session) -> DispatchResult:
        session.puzzle_stage = PUZZLE_PENDING
        return DispatchResult(output_lines=[self.profile.riddle.prompt])

    def _answer_riddle(self, line: str, session: Session) -> DispatchResult:
        riddle = self.profile.riddle
        if not riddle.matches(line):
            return DispatchResult(output_lines=[riddle.hint])
        session.puzzle_stage = PUZZLE_INACTIVE
        return DispatchResult(output_lines=[riddle.success],
                              events=[UnlockEvent(riddle.unlock_id)])

    # ── Password challenge ────────────────────────────────────────────────────

    def _check_password(self, line: str, session: Session) -> DispatchResult:
        if line == self.profile.password:
            session.auth_state      = AuthState.ROOT
            session.failed_attempts = 0
            audit.log_auth_event(session.session_id, session.origin, True, 0)
            return DispatchResult(
                output_lines=["ACCESS GRANTED. Welcome, operator."],
                events=[UnlockEvent(self.profile.admin_unlock_id), SoundEvent("access_granted")],
            )

        session.auth_state = AuthState.GUEST
        session.failed_attempts += 1
        attempts = session.failed_attempts
        result = DispatchResult(output_lines=["ACCESS DENIED."])
        lockout = attempts >= self.profile.lockout_threshold
        if lockout:
            session.failed_attempts = 0
            result.events.append(AlertEvent(self.profile.alert_duration_ms))
        audit.log_auth_event(session.session_id, session.origin, False, attempts, lockout=lockout)
        return result

    # ── Commands ──────────────────────────────────────────────────────────────

    def _run_command(self, line: str, session: Session, vfs: VirtualFileSystem) -> DispatchResult:
        name, *args = line.split()

        if name.lower() == self.profile.riddle.command:
            return self._start_riddle(session)

        cmd = self.registry.lookup(name)
        if cmd is None:
            return DispatchResult(output_lines=[f"Unknown: {name}"])
        if len(args) < cmd.min_args:
            return DispatchResult(output_lines=[f"Usage: {cmd.usage}"])
        if cmd.root_only and not session.is_root:
            return DispatchResult(output_lines=["Insufficient clearance. Use login."])

        ctx = CommandContext(
            name=cmd.name, args=args, session=session, vfs=vfs,
            profile=self.profile, regions=self.regions, companies=self.companies,
            clock=self.clock, registry=self.registry,
        )
        try:
            cmd.handler(ctx)
        except Exception:
            _log.exception("command %r failed on %r", cmd.name, line)
            return DispatchResult(output_lines=[f"{cmd.name}: internal error"])
        return ctx.result


_default: Optional[CommandDispatcher] = None


def dispatch(raw_line: str, session: Session, vfs: VirtualFileSystem) -> DispatchResult:
    """Dispatch with a shared map-profile dispatcher."""
    global _default
    if _default is None:
        _default = CommandDispatcher(companies=COMPANIES)
    return _default.dispatch(raw_line, session, vfs)
