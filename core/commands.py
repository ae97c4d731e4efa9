"""
Command registry.

Handlers are plain functions taking a `CommandContext`; they write output
lines and emit events through it and never raise for bad input.  The
`@command` decorator registers a handler under its name and aliases.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Optional, Sequence, TYPE_CHECKING

from core.events import Event
from core.geofences import Region
from core.paths import resolve
from core.session import Session
from core.virtual_fs import VirtualFileSystem

if TYPE_CHECKING:
    from core.profiles import ShellProfile


@dataclass
class DispatchResult:
    output_lines: list[str] = field(default_factory=list)
    events:       list[Event] = field(default_factory=list)


@dataclass
class CommandContext:
    name:      str
    args:      list[str]
    session:   Session
    vfs:       VirtualFileSystem
    profile:   "ShellProfile"
    regions:   Sequence[Region]
    companies: Sequence[str]
    clock:     Callable[[], str]
    registry:  "CommandRegistry"
    result:    DispatchResult = field(default_factory=DispatchResult)

    def write(self, *lines: str):
        self.result.output_lines.extend(lines)

    def emit(self, *events: Event):
        self.result.events.extend(events)

    def resolve(self, path: str) -> str:
        return resolve(self.session.cwd, path)


@dataclass(frozen=True)
class Command:
    name:        str
    handler:     Callable[[CommandContext], None]
    usage:       str
    description: str = ""
    min_args:    int = 0
    root_only:   bool = False
    aliases:     tuple[str, ...] = ()
    hidden:      bool = False
    group:       str = "core"


class CommandRegistry:
    """Name → Command map, looked up case-insensitively."""

    def __init__(self):
        self._commands: dict[str, Command] = {}
        self._names: dict[str, str] = {}

    def register(self, cmd: Command):
        taken = [n for n in (cmd.name, *cmd.aliases) if n in self]
        if taken:
            raise ValueError(f"command name already registered: {taken[0]}")
        self._commands[cmd.name] = cmd
        for name in (cmd.name, *cmd.aliases):
            self._names[name.lower()] = cmd.name

    def lookup(self, name: str) -> Optional[Command]:
        key = self._names.get(name.lower())
        return self._commands.get(key) if key else None

    def __contains__(self, name: str) -> bool:
        return name.lower() in self._names

    def __iter__(self):
        return iter(self._commands.values())

    def visible(self) -> list[Command]:
        return [c for c in self._commands.values() if not c.hidden]

    def command(self, name: str, usage: str = "", description: str = "",
                min_args: int = 0, root_only: bool = False,
                aliases: Sequence[str] = (), hidden: bool = False,
                group: str = "core"):
        """Decorator form of register()."""
        def deco(fn: Callable[[CommandContext], None]):
            self.register(Command(
                name=name, handler=fn, usage=usage or name,
                description=description or (fn.__doc__ or "").strip(),
                min_args=min_args, root_only=root_only,
                aliases=tuple(aliases), hidden=hidden, group=group,
            ))
            return fn
        return deco


REGISTRY = CommandRegistry()
command = REGISTRY.command
