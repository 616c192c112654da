"""Tests for system collaborators (clipboard, open, copy, sections)."""

import subprocess

import pytest

from ccexp import system
from ccexp.errors import ActionError, ClipboardError, OpenError


class FakeRun:
    """Stand-in for subprocess.run that records calls."""

    def __init__(self, error=None):
        self.calls = []
        self.error = error

    def __call__(self, cmd, **kwargs):
        self.calls.append((cmd, kwargs))
        if self.error is not None:
            raise self.error
        return subprocess.CompletedProcess(cmd, 0, "", "")


class TestClipboard:
    def test_no_tool_available(self, monkeypatch):
        monkeypatch.setattr(system.shutil, "which", lambda name: None)
        with pytest.raises(ClipboardError):
            system.write_to_clipboard("hello")

    def test_first_available_tool_used(self, monkeypatch):
        available = {"xclip", "xsel"}
        monkeypatch.setattr(system.shutil, "which",
                            lambda name: f"/usr/bin/{name}" if name in available else None)
        fake = FakeRun()
        monkeypatch.setattr(system.subprocess, "run", fake)

        system.write_to_clipboard("hello")

        cmd, kwargs = fake.calls[0]
        assert cmd == ["xclip", "-selection", "clipboard"]
        assert kwargs["input"] == "hello"

    def test_tool_failure(self, monkeypatch):
        monkeypatch.setattr(system.shutil, "which", lambda name: "/usr/bin/pbcopy")
        error = subprocess.CalledProcessError(1, ["pbcopy"], stderr="no display")
        monkeypatch.setattr(system.subprocess, "run", FakeRun(error))

        with pytest.raises(ClipboardError, match="no display"):
            system.write_to_clipboard("hello")


class TestOpen:
    def test_missing_opener(self, monkeypatch, tmp_path):
        monkeypatch.setattr(system.sys, "platform", "linux")
        monkeypatch.setattr(system.shutil, "which", lambda name: None)
        with pytest.raises(OpenError, match="xdg-open"):
            system.open_with_default_handler(tmp_path / "CLAUDE.md")

    def test_uses_platform_opener(self, monkeypatch, tmp_path):
        monkeypatch.setattr(system.sys, "platform", "darwin")
        monkeypatch.setattr(system.shutil, "which", lambda name: f"/usr/bin/{name}")
        fake = FakeRun()
        monkeypatch.setattr(system.subprocess, "run", fake)

        system.open_with_default_handler(tmp_path / "CLAUDE.md")
        assert fake.calls[0][0] == ["open", str(tmp_path / "CLAUDE.md")]

    def test_opener_failure(self, monkeypatch, tmp_path):
        monkeypatch.setattr(system.sys, "platform", "linux")
        monkeypatch.setattr(system.shutil, "which", lambda name: f"/usr/bin/{name}")
        monkeypatch.setattr(system.subprocess, "run",
                            FakeRun(subprocess.CalledProcessError(4, ["xdg-open"])))
        with pytest.raises(OpenError, match="status 4"):
            system.open_with_default_handler(tmp_path / "CLAUDE.md")


class TestFiles:
    def test_read_missing_file(self, tmp_path):
        with pytest.raises(ActionError):
            system.read_file_content(tmp_path / "missing.md")

    def test_copy_into_directory(self, tmp_path, write_file):
        source = write_file(tmp_path / "src" / "CLAUDE.md", "# Hi\n")
        dest = tmp_path / "dest"
        dest.mkdir()

        target = system.copy_file(source, dest)

        assert target == dest / "CLAUDE.md"
        assert target.read_text() == "# Hi\n"

    def test_copy_to_new_path(self, tmp_path, write_file):
        source = write_file(tmp_path / "CLAUDE.md", "# Hi\n")
        target = system.copy_file(source, tmp_path / "out" / "copy.md")
        assert target.read_text() == "# Hi\n"

    def test_copy_onto_itself(self, tmp_path, write_file):
        source = write_file(tmp_path / "CLAUDE.md")
        with pytest.raises(ActionError):
            system.copy_file(source, tmp_path)


class TestExtractSection:
    CONTENT = (
        "# Project\n"
        "Intro.\n"
        "## Setup\n"
        "Install things.\n"
        "### Details\n"
        "More.\n"
        "## Usage\n"
        "Run it.\n"
    )

    def test_section_until_same_level(self):
        assert system.extract_section(self.CONTENT, "Setup") == (
            "## Setup\nInstall things.\n### Details\nMore.\n"
        )

    def test_case_insensitive_and_hashes_ignored(self):
        assert system.extract_section(self.CONTENT, "## usage") == "## Usage\nRun it.\n"

    def test_top_level_runs_to_end(self):
        assert system.extract_section(self.CONTENT, "Project") == self.CONTENT

    def test_missing_section(self):
        assert system.extract_section(self.CONTENT, "Nope") is None

    def test_substring_match_picks_first_heading(self):
        assert system.extract_section(self.CONTENT, "set") == (
            "## Setup\nInstall things.\n### Details\nMore.\n"
        )

    def test_list_sections(self):
        assert system.list_sections(self.CONTENT) == ["Project", "Setup", "Details", "Usage"]


class TestReadPreview:
    def test_small_file(self, tmp_path, write_file):
        path = write_file(tmp_path / "CLAUDE.md", "# Hi\n")
        assert system.read_preview(path) == ("# Hi\n", False)

    def test_large_file_truncated(self, tmp_path, write_file):
        path = write_file(tmp_path / "CLAUDE.md", "x" * 100)
        assert system.read_preview(path, max_bytes=10) == ("x" * 10, True)

    def test_binary_file_rejected(self, tmp_path):
        path = tmp_path / "blob.md"
        path.write_bytes(b"# Hi\x00\x01\x02")
        with pytest.raises(ActionError, match="Binary"):
            system.read_preview(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(ActionError):
            system.read_preview(tmp_path / "missing.md")
