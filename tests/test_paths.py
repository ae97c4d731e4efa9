import pytest

from core.paths import canonicalize, is_within, resolve, segments, split_path


class TestCanonicalize:
    def test_root(self):
        assert canonicalize("/") == "/"
        assert canonicalize("") == "/"

    def test_collapses_slashes_and_dots(self):
        assert canonicalize("//docs/./regions.txt/") == "/docs/regions.txt"

    def test_dotdot_never_climbs_above_root(self):
        assert canonicalize("/../../etc") == "/etc"
        assert canonicalize("/docs/../..") == "/"

    def test_segments(self):
        assert segments("/a//b/") == ["a", "b"]


class TestResolve:
    def test_relative_against_cwd(self):
        assert resolve("/docs", "regions.txt") == "/docs/regions.txt"

    def test_absolute_ignores_cwd(self):
        assert resolve("/docs", "/etc") == "/etc"

    def test_empty_candidate_is_cwd(self):
        assert resolve("/docs", "") == "/docs"

    def test_parent_of_root_is_root(self):
        assert resolve("/", "..") == "/"

    def test_parent(self):
        assert resolve("/docs", "..") == "/"
        assert resolve("/usr/local", "../bin") == "/usr/bin"

    def test_laws(self):
        assert resolve("/a/b", "..") == "/a"
        assert resolve("/a/b", "../../x") == "/x"
        assert resolve("/a", ".") == "/a"
        assert resolve("/", "..") == "/"

    @pytest.mark.parametrize("cwd,path", [
        ("/", "docs"), ("/a/b", ".."), ("/a/b", "../../x"), ("/docs", "//secrets/"),
        ("/", "../../.."), ("/usr", "./local/../bin"), ("/tmp", ""),
    ])
    def test_idempotent(self, cwd, path):
        once = resolve(cwd, path)
        assert resolve(once, ".") == once
        assert resolve("/elsewhere", once) == once

    def test_result_is_canonical(self):
        for cwd, cand in [("/", "a/./b//"), ("/x/y", "../../.."), ("/", "/./")]:
            out = resolve(cwd, cand)
            assert out.startswith("/")
            assert out == "/" or not out.endswith("/")
            assert "." not in segments(out) and ".." not in segments(out)


class TestHelpers:
    def test_split_path(self):
        assert split_path("/docs/regions.txt") == ("/docs", "regions.txt")
        assert split_path("/secrets") == ("/", "secrets")
        assert split_path("/") == ("/", "")

    def test_is_within(self):
        assert is_within("/secrets", "/secrets")
        assert is_within("/secrets/x", "/secrets")
        assert not is_within("/secrets2", "/secrets")
        assert is_within("/anything", "/")
