from collections.abc import Callable
from pathlib import Path

import orjson
import pytest

from jsoncms.cli._commands._shared import ExitCode
from jsoncms.repository import ContentRepository
from jsoncms.utils import ContentRoot
from tests.conftest import GitProject


def commit_all(project: GitProject, message: str) -> None:
    with ContentRepository(project.root, ContentRoot(project.content_dir)) as repo:
        _ = repo.commit(message)


class TestStatusCommand:
    def test_not_a_repository(
        self,
        jsoncms_cli_with_exit_code: Callable[..., int],
        tmp_path: Path,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        code = jsoncms_cli_with_exit_code("--project-root", str(tmp_path), "status")

        assert code == ExitCode.NOT_FOUND
        assert "Not a Git repository" in capsys.readouterr().out

    def test_lists_changes(
        self,
        jsoncms_cli_with_exit_code: Callable[..., int],
        git_project: GitProject,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        _ = (git_project.content_dir / "home.json").write_text("{}")
        _ = (git_project.content_dir / "site.json").write_text("{}")
        commit_all(git_project, "Initial")
        _ = (git_project.content_dir / "home.json").write_text('{"a": 1}')
        _ = (git_project.content_dir / "new.json").write_text("{}")

        code = jsoncms_cli_with_exit_code(
            "--project-root", str(git_project.root), "status"
        )

        output = capsys.readouterr().out
        assert code == ExitCode.SUCCESS
        assert "On branch main" in output
        assert "~ home.json" in output
        assert "? new.json" in output
        assert "site.json" not in output
        assert "2 file(s) with uncommitted changes" in output

    def test_all_includes_unmodified(
        self,
        jsoncms_cli_with_exit_code: Callable[..., int],
        git_project: GitProject,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        _ = (git_project.content_dir / "site.json").write_text("{}")
        commit_all(git_project, "Initial")

        _ = jsoncms_cli_with_exit_code(
            "--project-root", str(git_project.root), "status", "--all"
        )

        output = capsys.readouterr().out
        assert "site.json" in output
        assert "0 file(s) with uncommitted changes" in output

    def test_clean_tree(
        self,
        jsoncms_cli_with_exit_code: Callable[..., int],
        git_project: GitProject,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        code = jsoncms_cli_with_exit_code(
            "--project-root", str(git_project.root), "status"
        )

        assert code == ExitCode.SUCCESS
        assert "No uncommitted content changes" in capsys.readouterr().out

    def test_json_output(
        self,
        jsoncms_cli_with_exit_code: Callable[..., int],
        git_project: GitProject,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        _ = (git_project.content_dir / "home.json").write_text("{}")

        code = jsoncms_cli_with_exit_code(
            "--project-root", str(git_project.root), "status", "--json"
        )

        assert code == ExitCode.SUCCESS
        assert orjson.loads(capsys.readouterr().out) == [["home.json", 0, 2, 0]]
