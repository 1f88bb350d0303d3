"""Shared test fixtures for jsoncms tests."""

import os
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

import orjson
import pytest
from dulwich.repo import Repo
from rich.console import Console

from jsoncms.config._loader import WELL_KNOWN_ENV_VARS
from jsoncms.utils import ContentRoot

WriteJson = Callable[[str, object], Path]

_TESTS_DIR = Path(__file__).parent
_SUITE_MARKERS = {
    "unit": pytest.mark.unit,
    "integration": pytest.mark.integration,
    "properties": pytest.mark.property,
}


def pytest_collection_modifyitems(items: list[pytest.Item]) -> None:
    for item in items:
        path = Path(item.path)
        if not path.is_relative_to(_TESTS_DIR):
            continue
        suite = path.relative_to(_TESTS_DIR).parts[0]
        if suite in _SUITE_MARKERS:
            item.add_marker(_SUITE_MARKERS[suite])


@dataclass(frozen=True, slots=True)
class GitProject:
    """Paths for a Git working tree with a content directory."""

    root: Path
    content_dir: Path
    home: Path


@pytest.fixture
def content_dir(tmp_path: Path) -> Path:
    path = tmp_path / "content"
    path.mkdir()
    return path


@pytest.fixture
def content_root(content_dir: Path) -> ContentRoot:
    return ContentRoot(content_dir)


@pytest.fixture
def write_json(content_dir: Path) -> WriteJson:
    """Return a function writing a JSON value to a content path."""

    def _write(content_path: str, value: object) -> Path:
        target = content_dir / content_path
        target.parent.mkdir(parents=True, exist_ok=True)
        _ = target.write_bytes(orjson.dumps(value))
        return target

    return _write


@pytest.fixture
def isolated_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point HOME and XDG_CONFIG_HOME at an empty directory.

    Keeps the developer's global Git config and credentials out of tests.
    """
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(home / ".config"))
    monkeypatch.delenv("GIT_TOKEN", raising=False)
    monkeypatch.delenv("GIT_USERNAME", raising=False)
    monkeypatch.delenv("GIT_CONFIG_GLOBAL", raising=False)
    return home


def init_repo(
    path: Path, *, name: str = "Test User", email: str = "test@example.com"
) -> Repo:
    """Initialize a non-bare repository on ``main`` with a local identity."""
    path.mkdir(parents=True, exist_ok=True)
    repo = Repo.init(str(path))
    repo.refs.set_symbolic_ref(b"HEAD", b"refs/heads/main")
    config = repo.get_config()
    if name:
        config.set((b"user",), b"name", name.encode())
    if email:
        config.set((b"user",), b"email", email.encode())
    config.set((b"commit",), b"gpgsign", b"false")
    config.write_to_path()
    return repo


@pytest.fixture
def git_project(tmp_path: Path, isolated_home: Path) -> GitProject:
    """Create a Git working tree with an empty ``content/`` directory.

    Structure:
        tmp_path/
            project/
                .git/
                content/
            home/
    """
    root = tmp_path / "project"
    init_repo(root).close()
    content = root / "content"
    content.mkdir()
    return GitProject(root=root.resolve(), content_dir=content.resolve(), home=isolated_home)


@pytest.fixture
def console() -> Console:
    return Console(
        width=120,
        force_terminal=True,
        highlight=False,
        color_system=None,
        legacy_windows=False,
    )


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove environment variables that feed into Settings.load."""
    for key in list(os.environ):
        if key.startswith("JSONCMS_"):
            monkeypatch.delenv(key)
    for key in WELL_KNOWN_ENV_VARS:
        monkeypatch.delenv(key, raising=False)
