"""
SSH front end.
Paramiko server interface, the per-connection handler and the channel
loop that feeds keystrokes into a TerminalOverlay and renders its output.
"""
import json
import logging
import threading
from typing import Optional, Sequence

import paramiko

from config.settings import SSH_BANNER, HOST_KEY_PATH, AUTH_USER, AUTH_PASS
from core import audit
from core.command_engine import CommandDispatcher
from core.terminal import TerminalOverlay, ends_session
from core.virtual_fs import VirtualFileSystem

sys_logger = logging.getLogger("system")

CLEAR_SCREEN = b"\033[H\033[2J"


class ShellServer(paramiko.ServerInterface):
    """
    Paramiko server interface that:
    * Accepts only password auth
    * Logs every credential attempt
    * Optionally enforces a specific username/password (or accepts all)
    """

    def __init__(self, client_ip: str, valid_user: str = "", valid_pass: str = ""):
        self.client_ip  = client_ip
        self.valid_user = valid_user
        self.valid_pass = valid_pass
        self.username   = ""
        self.event      = threading.Event()

    # ── Channel ───────────────────────────────────────────────────────────────

    def check_channel_request(self, kind, chanid):
        if kind == "session":
            return paramiko.OPEN_SUCCEEDED
        return paramiko.OPEN_FAILED_ADMINISTRATIVELY_PROHIBITED

    def get_allowed_auths(self, username):
        return "password"

    # ── Authentication ────────────────────────────────────────────────────────

    def check_auth_password(self, username: str, password: str):
        self.username = username
        if self.valid_user and self.valid_pass:
            if username == self.valid_user and password == self.valid_pass:
                audit.log_transport_auth(self.client_ip, username, "SUCCESS")
                return paramiko.AUTH_SUCCESSFUL
            audit.log_transport_auth(self.client_ip, username, "FAILED")
            return paramiko.AUTH_FAILED

        audit.log_transport_auth(self.client_ip, username, "ACCEPT_ALL")
        return paramiko.AUTH_SUCCESSFUL

    # ── PTY / shell ───────────────────────────────────────────────────────────

    def check_channel_pty_request(self, channel, term, width, height,
                                  pixelwidth, pixelheight, modes):
        return True

    def check_channel_shell_request(self, channel):
        self.event.set()
        return True


# ── Channel I/O ───────────────────────────────────────────────────────────────

class LineReader:
    """Char-by-char line editor over a channel (echo, backspace, history, ^C, ^D)."""

    def __init__(self, channel):
        self.channel  = channel
        self._last_cr = False

    def _recv(self) -> bytes:
        try:
            return self.channel.recv(1)
        except (OSError, EOFError, paramiko.SSHException):
            return b""

    def _escape_seq(self) -> bytes:
        """Read the rest of an ESC sequence: `[A`, `OH`, `[3~` ..."""
        c1 = self._recv()
        if c1 not in (b"[", b"O"):
            return c1
        c2 = self._recv()
        if c2.isdigit():
            return c1 + c2 + self._recv()
        return c1 + c2

    def _redraw(self, old: str, new: str):
        self.channel.send(b"\x08 \x08" * len(old) + new.encode(errors="replace"))

    def readline(self, echo: bool = True,
                 history: Sequence[str] = ()) -> Optional[str]:
        """
        Return one line, or None when the peer hangs up or sends ^D.

        Up/Down arrows walk `history` (oldest first); other escape
        sequences are discarded.
        """
        buf = ""
        pos = len(history)
        while True:
            ch = self._recv()
            if not ch:
                return None
            # swallow the LF of a CRLF pair
            if ch == b"\n" and self._last_cr and not buf:
                self._last_cr = False
                continue
            self._last_cr = ch == b"\r"
            if ch in (b"\r", b"\n"):
                self.channel.send(b"\r\n")
                return buf
            if ch in (b"\x7f", b"\x08"):
                if buf:
                    buf = buf[:-1]
                    if echo:
                        self.channel.send(b"\x08 \x08")
            elif ch == b"\x03":
                self.channel.send(b"^C\r\n")
                return ""
            elif ch == b"\x04":
                return None
            elif ch == b"\x1b":
                seq = self._escape_seq()
                if seq in (b"[A", b"OA") and pos > 0:
                    pos -= 1
                elif seq in (b"[B", b"OB") and pos < len(history):
                    pos += 1
                else:
                    continue
                new = history[pos] if pos < len(history) else ""
                if echo:
                    self._redraw(buf, new)
                buf = new
            else:
                text = ch.decode("utf-8", errors="ignore")
                buf += text
                if echo and text:
                    self.channel.send(ch)


def _send(channel, text: str):
    channel.send((text.replace("\n", "\r\n")).encode(errors="replace"))


def serve_channel(channel, overlay: TerminalOverlay):
    """Run the interactive loop until the peer leaves or the shell is closed."""
    overlay.open()
    _send(channel, "\n".join(overlay.lines) + "\n")
    reader = LineReader(channel)

    while True:
        _send(channel, overlay.prompt() + " ")
        secret = overlay.session.awaiting_password
        line = reader.readline(echo=not secret,
                               history=() if secret else overlay.session.history)
        if line is None:
            break

        result = overlay.submit(line)
        for out in result.output_lines:
            _send(channel, out + "\n")
        for ev in result.events:
            if ev.kind == "clear":
                channel.send(CLEAR_SCREEN)
            elif ev.kind == "alert":
                _send(channel, f"*** INTRUSION ALERT *** lockout {ev.duration_ms // 1000}s\n")

        if ends_session(result.events):
            break
        overlay.open()

    channel.send(b"logout\r\n")
    overlay.close()


# ── Connection handler ────────────────────────────────────────────────────────

def _load_host_key(path: str = HOST_KEY_PATH) -> paramiko.RSAKey:
    try:
        return paramiko.RSAKey(filename=path)
    except FileNotFoundError:
        key = paramiko.RSAKey.generate(2048)
        key.write_private_key_file(path)
        sys_logger.info(json.dumps({"event": "host_key_generated", "path": path}))
        return key


def handle_client(
    client_sock,
    addr,
    dispatcher: CommandDispatcher,
    vfs: VirtualFileSystem,
    username: str = AUTH_USER,
    password: str = AUTH_PASS,
):
    """
    Handle one inbound SSH connection.

    Parameters
    ----------
    client_sock : socket
    addr        : (ip, port) tuple
    dispatcher  : CommandDispatcher shared by all connections
    vfs         : VirtualFileSystem shared read-only by all connections
    username    : expected username (empty = accept all)
    password    : expected password (empty = accept all)
    """
    client_ip, port = addr[0], addr[1]
    audit.log_session_event("CONNECT", client_ip, port=port)

    transport = None
    try:
        transport = paramiko.Transport(client_sock)
        transport.local_version = SSH_BANNER
        transport.add_server_key(_load_host_key())

        server = ShellServer(client_ip, username, password)
        transport.start_server(server=server)

        channel = transport.accept(30)
        if channel is None:
            audit.log_session_event("NO_CHANNEL", client_ip)
            return

        server.event.wait(10)
        overlay = TerminalOverlay(dispatcher, vfs, origin=client_ip)
        serve_channel(channel, overlay)
        channel.close()

    except Exception as exc:
        audit.log_session_event("ERROR", client_ip, error=str(exc))
    finally:
        if transport:
            try:
                transport.close()
            except Exception:
                sys_logger.debug("transport close failed for %s", client_ip)
        try:
            client_sock.close()
        except OSError:
            pass
        audit.log_session_event("DISCONNECT", client_ip)
