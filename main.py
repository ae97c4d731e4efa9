#!/usr/bin/env python3
"""
Mission Control Terminal – Application Entry Point
===================================================
Usage:
    python main.py [--host HOST] [--port PORT] [--user USER] [--pass PASS]
                   [--open]            # accept any SSH credentials
                   [--profile map|briefing]
                   [--local]           # interactive terminal on this tty
                   [--no-ssh]          # do not start the SSH listener
                   [--dashboard]       # start the web API / SSE feed
"""
import argparse
import json
import logging
import socket
import sys
import threading

from config.settings import (
    BIND_HOST, BIND_PORT, AUTH_USER, AUTH_PASS, LOG_DIR,
    DASHBOARD_PORT, DEFAULT_PROFILE, COMPANIES,
)
from core.audit import configure_logging, now_iso
from core.command_engine import CommandDispatcher
from core.events import to_dict
from core.profiles import PROFILES, get_profile
from core.ssh_server import handle_client
from core.terminal import TerminalOverlay, ends_session
from core.virtual_fs import VirtualFileSystem, build_vfs

_sys = logging.getLogger("system")


def _setup_logging():
    configure_logging(LOG_DIR)
    # Also echo to stdout
    _stdout = logging.StreamHandler(sys.stdout)
    _stdout.setFormatter(logging.Formatter("%(asctime)s | %(message)s"))
    _sys.addHandler(_stdout)


# ── Local terminal ────────────────────────────────────────────────────────────

def run_local(dispatcher: CommandDispatcher, vfs: VirtualFileSystem):
    """Drive one overlay from stdin/stdout until `close`, ^D or ^C."""
    overlay = TerminalOverlay(dispatcher, vfs, origin="local")
    overlay.open()
    print("\n".join(overlay.lines))
    while overlay.is_open:
        try:
            line = input(overlay.prompt() + " ")
        except (EOFError, KeyboardInterrupt):
            print()
            break
        result = overlay.submit(line)
        for out in result.output_lines:
            print(out)
        for ev in result.events:
            if ev.kind == "clear":
                print("\033[H\033[2J", end="")
            elif ev.kind == "alert":
                print(f"*** INTRUSION ALERT *** lockout {ev.duration_ms // 1000}s")
            elif ev.kind != "close":
                print(f"[event] {json.dumps(to_dict(ev))}")
        if ends_session(result.events):
            break
        overlay.open()
    overlay.close()


# ── SSH listener ──────────────────────────────────────────────────────────────

def start_ssh_server(
    dispatcher: CommandDispatcher,
    vfs: VirtualFileSystem,
    host: str     = BIND_HOST,
    port: int     = BIND_PORT,
    username: str = AUTH_USER,
    password: str = AUTH_PASS,
):
    """Bind the SSH listener and spawn a thread per connection."""

    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
    try:
        sock.bind((host, port))
    except PermissionError:
        print(f"[!] Cannot bind to port {port}. Try a port above 1024.")
        sys.exit(1)

    sock.listen(100)

    mode = "open" if not username else "credential-enforced"
    _sys.info(json.dumps({
        "event": "ssh_start", "host": host, "port": port, "mode": mode,
        "profile": dispatcher.profile.name, "timestamp": now_iso(),
    }))
    print(f"[*] SSH terminal listening on {host}:{port}  [{mode}]")
    print(f"[*] Logs → {LOG_DIR}/")
    print("[*] Press Ctrl+C to stop.\n")

    while True:
        try:
            client_sock, addr = sock.accept()
            t = threading.Thread(
                target=handle_client,
                args=(client_sock, addr, dispatcher, vfs, username, password),
                daemon=True,
            )
            t.start()
        except KeyboardInterrupt:
            print("\n[*] Shutting down.")
            _sys.info(json.dumps({"event": "ssh_stop", "timestamp": now_iso()}))
            break
        except OSError as exc:
            print(f"[!] Accept error: {exc}")

    sock.close()


# ── CLI ───────────────────────────────────────────────────────────────────────

def main():
    parser = argparse.ArgumentParser(description="Mission Control terminal")
    parser.add_argument("--host",       default=BIND_HOST,  help="SSH bind address")
    parser.add_argument("--port",       default=BIND_PORT,  type=int, help="SSH bind port")
    parser.add_argument("--user",       default=AUTH_USER,  help="Expected SSH username")
    parser.add_argument("--pass",       dest="password", default=AUTH_PASS, help="Expected SSH password")
    parser.add_argument("--open",       action="store_true", help="Accept any SSH credentials")
    parser.add_argument("--profile",    default=DEFAULT_PROFILE, choices=sorted(PROFILES),
                        help="Terminal flavour")
    parser.add_argument("--local",      action="store_true", help="Run one terminal on this tty")
    parser.add_argument("--no-ssh",     action="store_true", help="Do not start the SSH listener")
    parser.add_argument("--dashboard",      action="store_true", help="Start web API on --dashboard-port")
    parser.add_argument("--dashboard-port", default=DASHBOARD_PORT, type=int, help="Dashboard port (default 5000)")
    args = parser.parse_args()

    _setup_logging()

    username = "" if args.open else args.user
    password = "" if args.open else args.password

    vfs = build_vfs(companies=COMPANIES)
    dispatcher = CommandDispatcher(profile=get_profile(args.profile), companies=COMPANIES)

    foreground_web = args.dashboard and args.no_ssh and not args.local
    if args.dashboard and not foreground_web:
        from web.app import start_dashboard
        threading.Thread(
            target=start_dashboard,
            kwargs={"host": "0.0.0.0", "port": args.dashboard_port},
            daemon=True,
        ).start()

    if args.local:
        run_local(dispatcher, vfs)
    elif foreground_web:
        from web.app import start_dashboard
        start_dashboard(host="0.0.0.0", port=args.dashboard_port)
    elif not args.no_ssh:
        start_ssh_server(
            dispatcher, vfs,
            host=args.host, port=args.port,
            username=username, password=password,
        )
    else:
        parser.error("nothing to run: use --local, --dashboard or drop --no-ssh")


if __name__ == "__main__":
    main()
