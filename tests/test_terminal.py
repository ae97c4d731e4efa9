import pytest

from core.events import AlertEvent
from core.terminal import TerminalOverlay


class FakeClock:
    def __init__(self):
        self.now = 100.0

    def __call__(self):
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def overlay(dispatcher, vfs, clock):
    o = TerminalOverlay(dispatcher, vfs, origin="test", clock=clock)
    o.open()
    return o


class TestPrompt:
    def test_guest_prompt(self, overlay):
        assert overlay.prompt() == "guest@mc:/$"
        overlay.submit("cd docs")
        assert overlay.prompt() == "guest@mc:/docs$"

    def test_password_and_root_prompt(self, overlay):
        overlay.submit("login")
        assert overlay.prompt() == "Password:"
        overlay.submit("legion")
        assert overlay.prompt() == "root@mc:/#"


class TestSubmit:
    def test_echo_and_output(self, overlay):
        overlay.submit("whoami")
        assert overlay.lines[-2:] == ["guest@mc:/$ whoami", "guest"]

    def test_password_is_masked_and_not_recorded(self, overlay):
        overlay.submit("login")
        overlay.submit("legion")
        assert "Password: ********" in overlay.lines
        assert not any("legion" in l for l in overlay.lines)
        assert overlay.session.history == ["login"]

    def test_history_skips_blank_lines(self, overlay):
        overlay.submit("pwd")
        overlay.submit("   ")
        overlay.submit("nosuch")
        assert overlay.session.history == ["pwd", "nosuch"]

    def test_history_is_bounded(self, dispatcher, vfs):
        o = TerminalOverlay(dispatcher, vfs, history_size=2)
        for line in ("pwd", "whoami", "date"):
            o.submit(line)
        assert o.session.history == ["whoami", "date"]

    def test_scrollback_is_bounded(self, dispatcher, vfs):
        o = TerminalOverlay(dispatcher, vfs, scrollback_size=5)
        for _ in range(10):
            o.submit("pwd")
        assert len(o.lines) == 5


class TestEvents:
    def test_clear_resets_screen(self, overlay):
        overlay.submit("ls")
        overlay.submit("clear")
        assert overlay.lines == [overlay.profile.banner, ""]

    def test_alert_timer(self, overlay, clock):
        overlay.submit("sudo su")
        assert overlay.alert_active
        clock.now += 5.9
        assert overlay.alert_active
        clock.now += 0.2
        assert not overlay.alert_active

    def test_lockout_alert(self, overlay):
        for _ in range(3):
            overlay.submit("login")
            overlay.submit("guess")
        assert overlay.alert_active
        assert overlay.session.failed_attempts == 0

    def test_close_event_hides_but_keeps_session(self, overlay):
        overlay.submit("cd docs")
        overlay.submit("goto area51")
        assert not overlay.is_open
        assert overlay.session.cwd == "/docs"

    def test_on_event_callback(self, dispatcher, vfs):
        seen = []
        o = TerminalOverlay(dispatcher, vfs, on_event=seen.append)
        o.submit("sudo su")
        assert seen == [AlertEvent(6000)]

    def test_on_event_failure_is_logged(self, dispatcher, vfs, caplog):
        def broken(ev):
            raise RuntimeError("map offline")

        o = TerminalOverlay(dispatcher, vfs, on_event=broken)
        result = o.submit("trigger ufo")
        assert result.output_lines == ["Triggered: ufo"]
        assert "event handler failed" in caplog.text


class TestLifecycle:
    def test_close_resets_session(self, overlay):
        sid = overlay.session.session_id
        overlay.submit("cd docs")
        overlay.close()
        assert not overlay.is_open
        assert overlay.session.cwd == "/"
        assert overlay.session.session_id == sid
        assert overlay.lines == [overlay.profile.banner, ""]

    def test_toggle(self, overlay):
        overlay.submit("cd docs")
        overlay.toggle()
        assert not overlay.is_open and overlay.session.cwd == "/"
        overlay.toggle()
        assert overlay.is_open
