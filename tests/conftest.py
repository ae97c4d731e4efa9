import pytest

from core.command_engine import CommandDispatcher
from core.profiles import BRIEFING_PROFILE, MAP_PROFILE
from core.session import new_session
from core.virtual_fs import build_vfs

COMPANIES = ["Acme Corp", "Globex", "Initech"]
FIXED_DATE = "Mon Jan 01 2024 00:00:00 UTC"


@pytest.fixture
def vfs():
    return build_vfs(companies=COMPANIES)


@pytest.fixture
def session():
    return new_session("test")


@pytest.fixture
def dispatcher():
    return CommandDispatcher(profile=MAP_PROFILE, companies=COMPANIES,
                             clock=lambda: FIXED_DATE)


@pytest.fixture
def briefing():
    return CommandDispatcher(profile=BRIEFING_PROFILE, companies=COMPANIES,
                             clock=lambda: FIXED_DATE)


@pytest.fixture
def run(dispatcher, session, vfs):
    """Dispatch one line against the shared map dispatcher/session/vfs."""
    def _run(line):
        return dispatcher.dispatch(line, session, vfs)
    return _run
