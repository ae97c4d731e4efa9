"""
Map-link and easter-egg verbs.

None of these move a camera or play a sound themselves: they validate the
arguments and emit structured events for the host's map, audio and
achievement layers.
"""
import math
from typing import Optional

from core.commands import CommandContext, command
from core.events import (
    CloseEvent, EffectEvent, NavigateEvent, SoundEvent, UnlockEvent, UxvEvent,
)
from core.geofences import find_region

SCREEN_EGGS = ("matrix", "ufo", "paws", "glitch", "neon", "scanlines", "beam", "hiking")
MAP_EGGS    = ("ping", "streak", "aurora", "ring", "radar", "sand", "stars", "neonSweep")

NAV_ZOOM        = 10
HQ_FLY_MS       = 1200
ZOOM_MS         = 500
CENTER_MS       = 800
SCAN_STAGGER_MS = 250
UNLOCK_STAGGER_MS = 180


def _num(text: Optional[str]) -> Optional[float]:
    try:
        value = float(text)
    except (TypeError, ValueError):
        return None
    return value if math.isfinite(value) else None


def _fmt(value: float) -> str:
    return str(int(value)) if value.is_integer() else repr(value)


def _leave_for_map(ctx: CommandContext, *events):
    """Emit navigation events, then close the overlay so the map is visible."""
    ctx.emit(*events, SoundEvent("navigate"), CloseEvent())


# ── Listings ──────────────────────────────────────────────────────────────────

@command("regions", group="map", description="List map regions")
def _regions(ctx: CommandContext):
    ctx.write(", ".join(r.key for r in ctx.regions))


@command("companies", group="map", description="List companies from resume")
def _companies(ctx: CommandContext):
    names = list(dict.fromkeys(n for n in ctx.companies if n))
    ctx.write(", ".join(names) or "(none)")


# ── Navigation ────────────────────────────────────────────────────────────────

def _goto_hq(ctx: CommandContext, query: str):
    if not ctx.companies:
        ctx.write("Map or career data not available")
        return
    target = next((n for n in ctx.companies if query.lower() in n.lower()), None)
    if target is None:
        ctx.write(f"Unknown company: {query}")
        return
    ctx.write(f"Navigating to {query} HQ…")
    _leave_for_map(
        ctx,
        NavigateEvent(f"hq:{target}", zoom=NAV_ZOOM, duration_ms=HQ_FLY_MS),
        UnlockEvent(f"visit_hq_{query.lower()}"),
    )


@command("goto", usage="goto <key> | goto hq <company>", min_args=1, group="map",
         description="Fly to a region or a company HQ")
def _goto(ctx: CommandContext):
    if ctx.args[0].lower() == "hq":
        query = " ".join(ctx.args[1:])
        if not query:
            ctx.write("Usage: goto hq <company>")
            return
        _goto_hq(ctx, query)
        return

    key = ctx.args[0].lower()
    region = find_region(key, ctx.regions)
    if region is None:
        ctx.write(f"Unknown region: {key}")
        return
    ctx.write(f"Navigating to {key}…")
    _leave_for_map(
        ctx,
        NavigateEvent(key, center=region.center, zoom=NAV_ZOOM),
        UnlockEvent(f"visit_{key}"),
    )


@command("hq", usage="hq <company>", min_args=1, group="map",
         description="Navigate to company HQ")
def _hq(ctx: CommandContext):
    _goto_hq(ctx, " ".join(ctx.args))


@command("zoom", usage="zoom <n>", group="map", description="Set map zoom")
def _zoom(ctx: CommandContext):
    level = _num(ctx.args[0] if ctx.args else None)
    if level is None:
        ctx.write("Usage: zoom <number>")
        return
    ctx.write(f"Zoom {_fmt(level)}")
    ctx.emit(NavigateEvent("camera", zoom=level, duration_ms=ZOOM_MS))


@command("center", usage="center <lng> <lat>", group="map", description="Center map")
def _center(ctx: CommandContext):
    lng = _num(ctx.args[0] if len(ctx.args) > 0 else None)
    lat = _num(ctx.args[1] if len(ctx.args) > 1 else None)
    if lng is None or lat is None:
        ctx.write("Usage: center <lng> <lat>")
        return
    ctx.write(f"Center {_fmt(lng)}, {_fmt(lat)}")
    ctx.emit(NavigateEvent("camera", center=(lng, lat), duration_ms=CENTER_MS))


@command("scan", group="map", description="Sweep sensors and effects")
def _scan(ctx: CommandContext):
    ctx.write("Scanning…")
    ctx.emit(UnlockEvent("map_scan"), SoundEvent("scan"))
    ctx.emit(*(EffectEvent(egg, i * SCAN_STAGGER_MS) for i, egg in enumerate(SCREEN_EGGS)))


# ── UXV ───────────────────────────────────────────────────────────────────────

UXV_HELP = ("uxv subcmds: start [lng lat], stop, goto <lng> <lat> | region <key>, "
            "speed <mps>, drop, return, follow <on|off>")


def _uxv(ctx: CommandContext, action: str, params: dict, line: str, sound: str = ""):
    ctx.write(line)
    ctx.emit(UxvEvent(action, params))
    if sound:
        ctx.emit(SoundEvent(sound))
    ctx.emit(CloseEvent())


@command("uxv", usage="uxv <subcmd>", group="map", description="Drive the unmanned vehicle")
def _uxv_cmd(ctx: CommandContext):
    args = ctx.args
    sub = args[0].lower() if args else ""

    if not sub or sub == "help":
        ctx.write(UXV_HELP)

    elif sub == "start":
        lng = _num(args[1] if len(args) > 1 else None)
        lat = _num(args[2] if len(args) > 2 else None)
        params = {"position": {"lng": lng, "lat": lat}} if lng is not None and lat is not None else {}
        _uxv(ctx, "start", params, "UXV: start", sound="engage")

    elif sub == "stop":
        _uxv(ctx, "stop", {}, "UXV: stop")

    elif sub == "goto":
        if len(args) > 1 and args[1].lower() == "region":
            key = args[2].lower() if len(args) > 2 else ""
            if not key:
                ctx.write("Usage: uxv goto region <key>")
                return
            region = find_region(key, ctx.regions)
            if region is None:
                ctx.write(f"Unknown region: {key}")
                return
            lng, lat = region.center
            _uxv(ctx, "goto", {"target": {"lng": lng, "lat": lat}},
                 f"UXV: target set to {key}", sound="navigate")
            return
        lng = _num(args[1] if len(args) > 1 else None)
        lat = _num(args[2] if len(args) > 2 else None)
        if lng is None or lat is None:
            ctx.write("Usage: uxv goto <lng> <lat>")
            return
        _uxv(ctx, "goto", {"target": {"lng": lng, "lat": lat}},
             f"UXV: target set to {_fmt(lng)}, {_fmt(lat)}", sound="navigate")

    elif sub == "speed":
        speed = _num(args[1] if len(args) > 1 else None)
        if speed is None:
            ctx.write("Usage: uxv speed <mps>")
            return
        _uxv(ctx, "speed", {"speed": speed}, f"UXV: speed {_fmt(speed)} m/s")

    elif sub == "drop":
        _uxv(ctx, "drop", {}, "UXV: payload drop")

    elif sub == "return":
        _uxv(ctx, "return", {}, "UXV: return to base")

    elif sub == "follow":
        val = args[1].lower() if len(args) > 1 else ""
        if val not in ("on", "off"):
            ctx.write("Usage: uxv follow <on|off>")
            return
        _uxv(ctx, "follow", {"follow": val == "on"}, f"UXV: follow {val}")

    else:
        ctx.write(f"UXV: unknown subcommand '{sub}'")


# ── Easter eggs ───────────────────────────────────────────────────────────────

@command("eggs", group="eggs", description="List available easter eggs")
def _eggs(ctx: CommandContext):
    ctx.write(f"Available (screen): {', '.join(SCREEN_EGGS)}.")
    ctx.write(f"Map (idle/geofence): {', '.join(MAP_EGGS)}.")


@command("trigger", usage="trigger <name>", min_args=1, group="eggs",
         description="Trigger an easter egg effect")
def _trigger(ctx: CommandContext):
    name = ctx.args[0].lower()
    if name in SCREEN_EGGS:
        ctx.write(f"Triggered: {name}")
        ctx.emit(EffectEvent(name))
    else:
        ctx.write(f"Unknown egg: {name}")


@command("unlock-all", root_only=True, hidden=True, group="eggs",
         description="Unlock all easter eggs (requires admin)")
def _unlock_all(ctx: CommandContext):
    ctx.write("All systems engaged.")
    ctx.emit(*(EffectEvent(egg, i * UNLOCK_STAGGER_MS) for i, egg in enumerate(SCREEN_EGGS)))
    ctx.emit(UnlockEvent("easter_hunter"))
