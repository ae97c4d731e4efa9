"""
Central configuration for the Mission Control terminal.
All settings can be overridden via environment variables.
"""
import os

# ── SSH front end ─────────────────────────────────────────────────────────────
SSH_BANNER   = os.getenv("SSH_BANNER",   "SSH-2.0-OpenSSH_8.9p1 mc-term")
HOST_KEY_PATH= os.getenv("HOST_KEY_PATH","server.key")
BIND_HOST    = os.getenv("BIND_HOST",    "0.0.0.0")
BIND_PORT    = int(os.getenv("BIND_PORT", "2222"))

# Transport credentials – leave both empty ("") to accept any SSH login.
# These guard the SSH socket only; the in-shell `login` uses ROOT_PASSWORD.
AUTH_USER    = os.getenv("AUTH_USER",    "")
AUTH_PASS    = os.getenv("AUTH_PASS",    "")

# ── Web dashboard ─────────────────────────────────────────────────────────────
DASHBOARD_HOST = os.getenv("DASHBOARD_HOST", "0.0.0.0")
DASHBOARD_PORT = int(os.getenv("DASHBOARD_PORT", "5000"))

# Web terminal sessions idle longer than this are dropped; the table never
# holds more than WEB_MAX_SESSIONS (least recently used goes first).
WEB_SESSION_TTL  = int(os.getenv("WEB_SESSION_TTL",  "1800"))   # seconds
WEB_MAX_SESSIONS = int(os.getenv("WEB_MAX_SESSIONS", "200"))

# ── Logging ───────────────────────────────────────────────────────────────────
LOG_DIR           = os.getenv("LOG_DIR",           "logs")
COMMAND_LOG       = os.path.join(LOG_DIR, "commands.log")
AUTH_LOG          = os.path.join(LOG_DIR, "auth.log")
SYSTEM_LOG        = os.path.join(LOG_DIR, "system.log")
LOG_MAX_BYTES     = int(os.getenv("LOG_MAX_BYTES",    "5000000"))   # 5 MB
LOG_BACKUP_COUNT  = int(os.getenv("LOG_BACKUP_COUNT", "5"))

# ── Shell behaviour ───────────────────────────────────────────────────────────
ROOT_PASSWORD     = os.getenv("ROOT_PASSWORD",     "legion")
ALERT_DURATION_MS = int(os.getenv("ALERT_DURATION_MS", "6000"))
LOCKOUT_THRESHOLD = int(os.getenv("LOCKOUT_THRESHOLD", "3"))
HISTORY_SIZE      = int(os.getenv("HISTORY_SIZE",      "200"))
SCROLLBACK_SIZE   = int(os.getenv("SCROLLBACK_SIZE",   "500"))
DEFAULT_PROFILE   = os.getenv("DEFAULT_PROFILE",   "map")

# Company names shown by `companies` / matched by `hq` (normally fed from resume data)
COMPANIES = [c.strip() for c in os.getenv("COMPANIES", "").split(",") if c.strip()]

# ── Terminal identity ─────────────────────────────────────────────────────────
TERMINAL_HOSTNAME = os.getenv("TERMINAL_HOSTNAME", "mc")
FAKE_UNAME        = "Linux mc 6.2.0-mc #1 SMP x86_64 GNU/Linux"
