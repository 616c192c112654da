"""Tests for the filesystem scanner."""

import logging
from pathlib import Path

import pytest

from ccexp.errors import ScanError
from ccexp.grouping import build_groups
from ccexp.scanner import (
    find_command_by_name,
    find_command_files,
    find_instruction_files,
    find_settings_files,
    scan_files,
    walk,
)
from ccexp.types import FileKind, ScanOptions


def _names(records, root):
    return sorted(str(r.path.relative_to(root)) for r in records)


class TestWalk:
    def test_missing_root_is_empty(self, tmp_path):
        assert walk(tmp_path / "nope", lambda p: True, max_depth=5) == []

    def test_root_is_a_file(self, tmp_path):
        target = tmp_path / "file.txt"
        target.write_text("x")
        with pytest.raises(ScanError):
            walk(target, lambda p: True, max_depth=5)

    def test_depth_zero_only_lists_root(self, project, write_file):
        write_file(project / "CLAUDE.md")
        write_file(project / "a" / "CLAUDE.md")
        found = walk(project, lambda p: p.name == "CLAUDE.md", max_depth=0)
        assert found == [project / "CLAUDE.md"]

    def test_symlinked_directories_not_followed(self, project, tmp_path, write_file):
        outside = tmp_path / "outside"
        write_file(outside / "CLAUDE.md")
        (project / "link").symlink_to(outside, target_is_directory=True)
        assert find_instruction_files(project) == []

    def test_entries_of_unenterable_directory_skipped(
        self, project, home, write_file, monkeypatch, caplog
    ):
        write_file(project / "CLAUDE.md")
        write_file(project / "locked" / "inner" / "CLAUDE.md")

        def denied(real):
            def check(self, *args, **kwargs):
                if self.parent.name == "locked":
                    raise PermissionError(13, "Permission denied", str(self))
                return real(self, *args, **kwargs)
            return check

        monkeypatch.setattr(Path, "is_dir", denied(Path.is_dir))
        monkeypatch.setattr(Path, "is_file", denied(Path.is_file))

        with caplog.at_level(logging.WARNING, logger="ccexp"):
            records = scan_files(ScanOptions(path=project, home=home))

        assert _names(records, project.resolve()) == ["CLAUDE.md"]
        assert "Skipping unreadable entry" in caplog.text


class TestFinders:
    def test_node_modules_never_descended(self, project, write_file):
        write_file(project / "CLAUDE.md")
        write_file(project / "node_modules" / "pkg" / "CLAUDE.md")
        write_file(project / "web" / "node_modules" / "CLAUDE.md")

        for include_hidden in (False, True):
            found = find_instruction_files(project, include_hidden=include_hidden)
            assert found == [project / "CLAUDE.md"]

    def test_security_dirs_never_descended(self, project, write_file):
        write_file(project / ".ssh" / "CLAUDE.md")
        write_file(project / "secrets" / "CLAUDE.md")
        assert find_instruction_files(project, include_hidden=True) == []

    def test_hidden_dirs_follow_toggle(self, project, write_file):
        hidden = write_file(project / ".notes" / "CLAUDE.md")
        assert find_instruction_files(project) == []
        assert find_instruction_files(project, include_hidden=True) == [hidden]

    def test_claude_dir_always_traversed(self, project, write_file):
        command = write_file(project / ".claude" / "commands" / "review.md", "Review.")
        settings = write_file(project / ".claude" / "settings.json", "{}")

        assert find_command_files(project) == [command]
        assert find_settings_files(project) == [settings]

    def test_non_recursive_depth(self, project, write_file):
        shallow = write_file(project / "a" / "CLAUDE.md")
        write_file(project / "a" / "b" / "CLAUDE.md")
        assert find_instruction_files(project, recursive=False) == [shallow]

    def test_non_recursive_commands_allow_namespace_level(self, project, write_file):
        nested = write_file(project / ".claude" / "commands" / "git" / "commit.md", "Commit")
        write_file(project / ".claude" / "commands" / "git" / "deep" / "x.md", "Deep")
        assert find_command_files(project, recursive=False) == [nested]

    def test_extra_exclusions(self, project, write_file):
        from ccexp.exclusions import build_exclusions

        write_file(project / "docs" / "CLAUDE.md")
        assert find_instruction_files(project, exclusions=build_exclusions(["docs"])) == []


class TestScanFiles:
    def test_project_and_local_override(self, project, home, write_file):
        write_file(project / "CLAUDE.md", "# Project\n")
        write_file(project / "CLAUDE.local.md", "# Local\n")

        records = scan_files(ScanOptions(path=project, home=home))

        assert {r.kind for r in records} == {FileKind.PROJECT_CONFIG, FileKind.LOCAL_OVERRIDE}
        assert len(records) == 2
        assert len(build_groups(records)) == 2

    def test_all_kinds(self, project, home, write_file):
        write_file(project / "CLAUDE.md")
        write_file(project / ".claude" / "commands" / "git" / "commit.md", "# Commit\n")
        write_file(project / ".claude" / "settings.json", "{}")
        write_file(project / ".claude" / "settings.local.json", "{}")

        records = scan_files(ScanOptions(path=project, home=home))
        assert _names(records, project) == [
            ".claude/commands/git/commit.md",
            ".claude/settings.json",
            ".claude/settings.local.json",
            "CLAUDE.md",
        ]

    def test_user_level_files(self, project, home, write_file):
        write_file(home / ".claude" / "CLAUDE.md", "# Global\n")
        write_file(home / ".claude" / "commands" / "mine.md", "# Mine\n")
        write_file(home / ".claude" / "settings.json", "{}")

        records = scan_files(ScanOptions(path=project, home=home))
        by_kind = {r.kind: r for r in records}

        assert by_kind[FileKind.GLOBAL_CONFIG].path == home / ".claude" / "CLAUDE.md"
        assert by_kind[FileKind.COMMAND_DEFINITION].command.scope == "user"
        assert by_kind[FileKind.SETTINGS].path == home / ".claude" / "settings.json"

    def test_user_files_can_be_skipped(self, project, home, write_file):
        write_file(home / ".claude" / "CLAUDE.md", "# Global\n")
        assert scan_files(ScanOptions(path=project, home=home, include_user_files=False)) == []

    def test_deduplicates_when_root_is_home(self, home, write_file):
        global_md = write_file(home / ".claude" / "CLAUDE.md", "# Global\n")
        write_file(home / ".claude" / "commands" / "mine.md", "# Mine\n")

        records = scan_files(ScanOptions(path=home, home=home))
        paths = [r.path for r in records]

        assert len(paths) == len(set(paths))
        assert global_md in paths

    def test_kind_filter(self, project, home, write_file):
        write_file(project / "CLAUDE.md")
        write_file(project / "CLAUDE.local.md")
        write_file(project / ".claude" / "commands" / "review.md", "Review")

        records = scan_files(ScanOptions(path=project, home=home, kind=FileKind.LOCAL_OVERRIDE))
        assert [r.kind for r in records] == [FileKind.LOCAL_OVERRIDE]

    def test_rejected_files_are_absent(self, project, home, write_file):
        write_file(project / "CLAUDE.md", "no heading here\n")
        write_file(project / ".claude" / "settings.json", "{broken")
        write_file(project / ".claude" / "commands" / "blank.md", "\n")
        assert scan_files(ScanOptions(path=project, home=home)) == []

    def test_missing_root_is_empty(self, tmp_path, home):
        assert scan_files(ScanOptions(path=tmp_path / "missing", home=home)) == []

    def test_root_is_a_file_raises(self, tmp_path, home):
        target = tmp_path / "CLAUDE.md"
        target.write_text("# x\n")
        with pytest.raises(ScanError):
            scan_files(ScanOptions(path=target, home=home))

    def test_find_command_by_name(self, project, home, write_file):
        path = write_file(project / ".claude" / "commands" / "git" / "commit.md", "# Commit\n")

        options = ScanOptions(path=project, home=home)
        assert find_command_by_name("git:commit", options).path == path
        assert find_command_by_name("/git:commit", options).path == path
        assert find_command_by_name("nope", options) is None
