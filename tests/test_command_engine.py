import pytest

from core.command_engine import MASKED, CommandDispatcher
from core.commands import CommandRegistry
from core.events import AlertEvent, SoundEvent, UnlockEvent
from core.session import AuthState, PUZZLE_INACTIVE, PUZZLE_PENDING
from core.virtual_fs import SECRETS
from core import audit


def kinds(result):
    return [e.kind for e in result.events]


class TestBasics:
    def test_empty_line(self, run, session):
        before = session.snapshot()
        assert run("   ").output_lines == [""]
        assert run("").events == []
        assert session.snapshot() == before

    def test_unknown_command(self, run, session):
        before = session.snapshot()
        result = run("frobnicate now")
        assert result.output_lines == ["Unknown: frobnicate"]
        assert result.events == []
        assert session.snapshot() == before

    def test_lookup_is_case_insensitive(self, run):
        assert run("PWD").output_lines == ["/"]

    def test_missing_args_prints_usage(self, run):
        assert run("cat").output_lines == ["Usage: cat <file>"]
        assert run("goto").output_lines == ["Usage: goto <key> | goto hq <company>"]

    def test_handler_failure_is_contained(self, session, vfs):
        reg = CommandRegistry()

        @reg.command("boom")
        def _boom(ctx):
            raise RuntimeError("kaboom")

        d = CommandDispatcher(registry=reg)
        assert d.dispatch("boom", session, vfs).output_lines == ["boom: internal error"]

    def test_duplicate_names_are_rejected(self):
        reg = CommandRegistry()
        reg.command("stat", aliases=("st",))(lambda ctx: None)
        with pytest.raises(ValueError):
            reg.command("ST")(lambda ctx: None)
        assert "stat" in reg and "St" in reg and "nope" not in reg

    def test_hidden_commands_still_dispatch(self, session, vfs):
        reg = CommandRegistry()
        reg.command("ghost", hidden=True)(lambda ctx: ctx.write("boo"))
        assert reg.visible() == []
        assert CommandDispatcher(registry=reg).dispatch("ghost", session, vfs).output_lines == ["boo"]


class TestPasswordChallenge:
    def test_login_then_correct_password(self, run, session):
        assert run("login").output_lines == ["Password:"]
        assert session.auth_state is AuthState.AWAITING_PASSWORD

        result = run("legion")
        assert result.output_lines == ["ACCESS GRANTED. Welcome, operator."]
        assert result.events == [UnlockEvent("map_admin"), SoundEvent("access_granted")]
        assert session.is_root and session.failed_attempts == 0

    def test_login_when_root(self, run):
        run("login")
        run("legion")
        assert run("login").output_lines == ["Already logged in as admin."]

    def test_password_is_case_sensitive(self, run, session):
        run("login")
        assert run("LEGION").output_lines == ["ACCESS DENIED."]
        assert session.auth_state is AuthState.GUEST

    def test_password_line_is_never_a_command(self, run, session):
        run("login")
        assert run("help").output_lines == ["ACCESS DENIED."]
        assert session.failed_attempts == 1

    def test_lockout_after_three_failures(self, run, session):
        for expected in (1, 2):
            run("login")
            result = run("wrong")
            assert result.events == []
            assert session.failed_attempts == expected
        run("login")
        result = run("wrong")
        assert result.output_lines == ["ACCESS DENIED."]
        assert result.events == [AlertEvent(6000)]
        assert session.failed_attempts == 0
        assert session.auth_state is AuthState.GUEST

    def test_success_resets_counter(self, run, session):
        run("login")
        run("nope")
        run("login")
        run("legion")
        assert session.failed_attempts == 0

    def test_password_is_masked_in_audit(self, run):
        audit.drain(limit=10_000)
        run("login")
        run("legion")
        records = audit.drain()
        commands = [r["command"] for r in records if r["event_type"] == "command"]
        assert commands == ["login", MASKED]
        auth = [r for r in records if r["event_type"] == "auth"]
        assert auth[0]["success"] is True
        assert "legion" not in repr(records)

    def test_audit_names_the_user_who_typed_the_line(self, run):
        audit.drain(limit=10_000)
        run("login")
        run("legion")
        run("whoami")
        users = [r["username"] for r in audit.drain() if r["event_type"] == "command"]
        assert users == ["guest", "guest", "root"]


class TestRiddle:
    def test_probe_riddle(self, run, session):
        result = run("probe")
        assert "PROBE" in result.output_lines[0]
        assert session.puzzle_stage == PUZZLE_PENDING

        assert run("ls").output_lines == ["Hint: a classic UFO trope."]
        assert session.puzzle_stage == PUZZLE_PENDING

        result = run("Watch the SKIES")
        assert result.output_lines == ["Probe complete. Anomalies acknowledged."]
        assert result.events == [UnlockEvent("hidden_commands")]
        assert session.puzzle_stage == PUZZLE_INACTIVE

    def test_riddle_wins_over_password(self, run, session):
        run("probe")
        assert run("login").output_lines == ["Hint: a classic UFO trope."]
        assert session.auth_state is AuthState.GUEST

    def test_briefing_puzzle(self, briefing, session, vfs):
        assert briefing.dispatch("puzzle", session, vfs).output_lines[0].startswith("RIDDLE:")
        result = briefing.dispatch("follow the white rabbit", session, vfs)
        assert result.events == [UnlockEvent("code_breaker")]

    def test_riddles_are_per_profile(self, briefing, session, vfs):
        assert briefing.dispatch("probe", session, vfs).output_lines == ["Unknown: probe"]

    def test_briefing_admin_unlock(self, briefing, session, vfs):
        briefing.dispatch("login", session, vfs)
        result = briefing.dispatch("legion", session, vfs)
        assert result.events[0] == UnlockEvent("hidden_commands")


class TestClearance:
    def test_root_only_command_as_guest(self, run):
        result = run("unlock-all")
        assert result.output_lines == ["Insufficient clearance. Use login."]
        assert result.events == []

    def test_root_only_command_as_root(self, run):
        run("login")
        run("legion")
        result = run("unlock-all")
        assert result.output_lines == ["All systems engaged."]
        assert result.events[-1] == UnlockEvent("easter_hunter")


class TestScenario:
    def test_guest_walkthrough(self, run, session):
        assert run("cd docs").output_lines == []
        assert session.cwd == "/docs"
        assert run("ls").output_lines == ["regions.txt  companies.txt"]
        assert run("cat companies.txt").output_lines == ["Acme Corp, Globex, Initech"]
        assert run("cd ..").output_lines == []
        assert run("cat secrets").output_lines == ["cat: secrets: Permission denied"]
        run("login")
        run("legion")
        assert run("cat secrets").output_lines[0] == "CLASSIFIED // EYES ONLY"
        assert run("whoami").output_lines == ["root"]

    def test_docs_login_secrets_sequence(self, run, session):
        run("cd /docs")
        assert run("ls").output_lines == ["regions.txt  companies.txt"]
        assert run("cat regions.txt").output_lines[0] == "area51"
        assert run("login").output_lines == ["Password:"]
        assert run("foo").output_lines == ["ACCESS DENIED."]
        assert session.failed_attempts == 1
        assert session.auth_state is AuthState.GUEST
        run("login")
        result = run("legion")
        assert session.is_root
        assert UnlockEvent("map_admin") in result.events
        assert run("cat /secrets").output_lines == SECRETS.splitlines()

    def test_module_level_dispatch(self, session, vfs):
        from core.command_engine import dispatch
        assert dispatch("whoami", session, vfs).output_lines == ["guest"]


@pytest.mark.parametrize("line", ["close", "exit", "EXIT"])
def test_close_aliases(run, line):
    result = run(line)
    assert result.output_lines == ["Session closed."]
    assert kinds(result) == ["close"]
