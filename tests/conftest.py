"""Pytest fixtures for ccexp tests."""

import logging
from datetime import datetime
from pathlib import Path

import pytest

from ccexp.types import CommandMetadata, FileKind, FileRecord


@pytest.fixture(autouse=True)
def isolated_env(tmp_path, monkeypatch):
    """Point HOME and XDG_CONFIG_HOME into tmp_path and clear CCEXP_* vars."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
    monkeypatch.delenv("CCEXP_THEME", raising=False)
    monkeypatch.delenv("CCEXP_DEBUG", raising=False)
    return home


@pytest.fixture
def home(isolated_env):
    return isolated_env


@pytest.fixture
def project(tmp_path):
    project = tmp_path / "project"
    project.mkdir()
    return project


@pytest.fixture
def write_file():
    """Write a file (creating parents) and return its path."""

    def _write(path: Path, content: str = "# Title\n") -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)
        return path

    return _write


@pytest.fixture
def make_record():
    """Build a FileRecord without touching the filesystem."""

    def _make(path, kind=FileKind.PROJECT_CONFIG, command_name=None, **kwargs) -> FileRecord:
        command = None
        if command_name is not None:
            namespace = command_name.split(":")[0] if ":" in command_name else None
            command = CommandMetadata(name=command_name, scope="project", namespace=namespace)
        return FileRecord(
            path=Path(path),
            kind=kind,
            size=kwargs.pop("size", 42),
            last_modified=kwargs.pop("last_modified", datetime(2024, 1, 1, 12, 0)),
            command=command,
            **kwargs,
        )

    return _make


@pytest.fixture
def sample_records(make_record):
    """Five records across three kinds, all under /work/app."""
    return [
        make_record("/work/app/.claude/commands/review.md", FileKind.COMMAND_DEFINITION,
                    command_name="review"),
        make_record("/work/app/sub/CLAUDE.md"),
        make_record("/work/app/CLAUDE.local.md", FileKind.LOCAL_OVERRIDE),
        make_record("/work/app/.claude/commands/deploy.md", FileKind.COMMAND_DEFINITION,
                    command_name="deploy"),
        make_record("/work/app/CLAUDE.md"),
    ]


@pytest.fixture(autouse=True)
def restore_ccexp_logger():
    """Undo handler/level changes made by the CLI's logging setup."""
    logger = logging.getLogger("ccexp")
    handlers = list(logger.handlers)
    level = logger.level
    propagate = logger.propagate
    yield
    logger.handlers[:] = handlers
    logger.setLevel(level)
    logger.propagate = propagate
