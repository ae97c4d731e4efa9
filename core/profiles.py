"""
Terminal profiles: the flavour constants that differ between the map
overlay and the executive-briefing overlay.
"""
from dataclasses import dataclass

from config.settings import (
    ROOT_PASSWORD, ALERT_DURATION_MS, LOCKOUT_THRESHOLD, TERMINAL_HOSTNAME,
)


@dataclass(frozen=True)
class Riddle:
    command:   str
    prompt:    str
    keywords:  tuple[str, ...]
    hint:      str
    success:   str
    unlock_id: str

    def matches(self, answer: str) -> bool:
        text = answer.lower()
        return all(k in text for k in self.keywords)


@dataclass(frozen=True)
class ShellProfile:
    name:              str
    banner:            str
    riddle:            Riddle
    admin_unlock_id:   str
    password:          str = ROOT_PASSWORD
    hostname:          str = TERMINAL_HOSTNAME
    alert_duration_ms: int = ALERT_DURATION_MS
    lockout_threshold: int = LOCKOUT_THRESHOLD


MAP_PROFILE = ShellProfile(
    name="map",
    banner="MAP-TERM v0.1 — type 'help'",
    admin_unlock_id="map_admin",
    riddle=Riddle(
        command="probe",
        prompt='PROBE: Complete the phrase to calibrate sensors. "_____ the _____"',
        keywords=("watch", "skies"),
        hint="Hint: a classic UFO trope.",
        success="Probe complete. Anomalies acknowledged.",
        unlock_id="hidden_commands",
    ),
)

BRIEFING_PROFILE = ShellProfile(
    name="briefing",
    banner="MC-TERM v0.1 — type 'help'",
    admin_unlock_id="hidden_commands",
    riddle=Riddle(
        command="puzzle",
        prompt="RIDDLE: The signal hides in green rain. What must you do?",
        keywords=("follow", "rabbit"),
        hint="Hint: what did Morpheus say to Neo?",
        success="RIDDLE SOLVED. The matrix acknowledges your curiosity.",
        unlock_id="code_breaker",
    ),
)

PROFILES = {p.name: p for p in (MAP_PROFILE, BRIEFING_PROFILE)}


def get_profile(name: str) -> ShellProfile:
    try:
        return PROFILES[name.lower()]
    except KeyError:
        raise ValueError(f"unknown terminal profile: {name!r}") from None
