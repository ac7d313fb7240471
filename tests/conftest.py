"""
Shared fixtures: throwaway git repositories, isolated config dirs and a stub generator.
"""

import asyncio
import io

import pytest
from git import Repo
from loguru import logger
from rich.console import Console

from devpilot.ai_backends.base import MessageGenerator
from devpilot.config.settings import Settings
from devpilot.ui.console import DevPilotConsole


class StubGenerator(MessageGenerator):
    """In-process generator returning canned content or raising a canned error."""

    def __init__(self, content: str = "", error: Exception = None, delay: float = 0, timeout: float = 60):
        super().__init__(instruction="write a commit message", timeout=timeout)
        self.content = content
        self.error = error
        self.delay = delay
        self.calls = []

    @property
    def target(self) -> str:
        return "stub-ai"

    async def call_api(self, diff: str) -> str:
        self.calls.append(diff)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error:
            raise self.error
        return self.content

    async def health_check(self) -> bool:
        return True


@pytest.fixture(autouse=True)
def isolated_env(tmp_path, monkeypatch):
    """Keep tests away from the user's config, cache and editor."""
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_CACHE_HOME", str(tmp_path / "cache"))
    monkeypatch.delenv("EDITOR", raising=False)
    for name in ("DEVPILOT_GENERATOR__TIMEOUT", "DEVPILOT_GENERATOR__BACKEND_TYPE"):
        monkeypatch.delenv(name, raising=False)
    yield
    logger.remove()


@pytest.fixture
def git_repo(tmp_path):
    """Repository with one committed file."""
    path = tmp_path / "work"
    repo = Repo.init(path)
    with repo.config_writer() as cw:
        cw.set_value("user", "name", "Test User")
        cw.set_value("user", "email", "test@example.com")
        cw.set_value("commit", "gpgsign", "false")

    (path / "README.md").write_text("# Test Project\n")
    repo.index.add(["README.md"])
    repo.index.commit("Initial commit")
    return repo


@pytest.fixture
def remote_repo(tmp_path, git_repo):
    """Bare repository registered as ``origin`` of ``git_repo``."""
    bare_path = tmp_path / "remote.git"
    bare = Repo.init(bare_path, bare=True)
    git_repo.create_remote("origin", str(bare_path))
    return bare


@pytest.fixture
def settings():
    return Settings(ui={"use_colors": False})


@pytest.fixture
def stub_generator():
    return StubGenerator


@pytest.fixture
def scripted_console(settings):
    """Real console answering prompts from ``answers``; output kept in ``.output``."""

    def make(*answers: str) -> DevPilotConsole:
        buffer = io.StringIO()
        rich_console = Console(file=buffer, width=100, color_system=None)
        console = DevPilotConsole(settings, console=rich_console, stream=io.StringIO("".join(f"{a}\n" for a in answers)))
        console.output = buffer
        return console

    return make
