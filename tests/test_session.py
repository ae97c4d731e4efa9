from core.session import AuthState, PUZZLE_INACTIVE, PUZZLE_PENDING, new_session


class TestSession:
    def test_defaults(self):
        s = new_session("web")
        assert s.cwd == "/"
        assert s.auth_state is AuthState.GUEST
        assert s.failed_attempts == 0
        assert s.puzzle_stage == PUZZLE_INACTIVE
        assert s.history == []
        assert s.origin == "web"
        assert len(s.session_id) == 12

    def test_ids_are_unique(self):
        assert new_session().session_id != new_session().session_id

    def test_username_follows_auth_state(self):
        s = new_session()
        assert s.username == "guest"
        s.auth_state = AuthState.AWAITING_PASSWORD
        assert s.awaiting_password and s.username == "guest"
        s.auth_state = AuthState.ROOT
        assert s.is_root and s.username == "root"

    def test_record_is_bounded(self):
        s = new_session()
        for i in range(5):
            s.record(f"cmd{i}", limit=3)
        assert s.history == ["cmd2", "cmd3", "cmd4"]

    def test_reset_keeps_identity(self):
        s = new_session("ssh")
        sid = s.session_id
        s.cwd, s.auth_state, s.failed_attempts, s.puzzle_stage = "/docs", AuthState.ROOT, 2, PUZZLE_PENDING
        s.record("ls")
        s.reset()
        assert (s.cwd, s.auth_state, s.failed_attempts, s.puzzle_stage, s.history) == \
            ("/", AuthState.GUEST, 0, PUZZLE_INACTIVE, [])
        assert s.session_id == sid and s.origin == "ssh"

    def test_snapshot(self):
        snap = new_session().snapshot()
        assert snap["auth_state"] == "guest"
        assert set(snap) >= {"session_id", "cwd", "failed_attempts", "puzzle_stage", "history"}
