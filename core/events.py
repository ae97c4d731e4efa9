"""
Side-effect events emitted by the dispatcher.

The core never acts on these; the host switches on `kind` and drives the
map, audio, achievements or its own timers.
"""
from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Optional, Union


@dataclass(frozen=True)
class AlertEvent:
    duration_ms: int
    kind: str = field(default="alert", init=False)


@dataclass(frozen=True)
class UnlockEvent:
    id: str
    kind: str = field(default="unlock", init=False)


@dataclass(frozen=True)
class ClearEvent:
    kind: str = field(default="clear", init=False)


@dataclass(frozen=True)
class NavigateEvent:
    target: str
    center: Optional[tuple[float, float]] = None
    zoom: Optional[float] = None
    duration_ms: Optional[int] = None
    kind: str = field(default="navigate", init=False)


@dataclass(frozen=True)
class UxvEvent:
    action: str
    params: dict[str, Any] = field(default_factory=dict)
    kind: str = field(default="uxv", init=False)


@dataclass(frozen=True)
class SoundEvent:
    name: str
    kind: str = field(default="sound", init=False)


@dataclass(frozen=True)
class EffectEvent:
    name: str
    delay_ms: int = 0
    kind: str = field(default="effect", init=False)


@dataclass(frozen=True)
class CloseEvent:
    kind: str = field(default="close", init=False)


Event = Union[AlertEvent, UnlockEvent, ClearEvent, NavigateEvent,
              UxvEvent, SoundEvent, EffectEvent, CloseEvent]

EVENT_KINDS = ("alert", "unlock", "clear", "navigate", "uxv", "sound", "effect", "close")


def to_dict(event: Event) -> dict[str, Any]:
    """JSON-friendly form, `kind` first, unset optionals dropped."""
    body = {k: v for k, v in asdict(event).items() if k != "kind" and v is not None}
    if "center" in body:
        body["center"] = list(body["center"])
    return {"kind": event.kind, **body}
