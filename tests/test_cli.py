"""
Typer application: exit codes, configuration display and subcommand wiring.
"""

import json
from pathlib import Path
import signal
import sys
from unittest.mock import MagicMock, patch

from typer.testing import CliRunner

from devpilot import __version__
from devpilot.cli import app
from devpilot.scaffold.vite import ScaffoldError
from devpilot.ui.console import DevPilotConsole


runner = CliRunner()


def test_version():
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_outside_repository_exits_non_zero(tmp_path):
    plain = tmp_path / "plain"
    plain.mkdir()

    result = runner.invoke(app, ["--repo", str(plain)])

    assert result.exit_code == 1
    assert "Not a git repository" in result.output


def test_clean_repository_exits_zero(git_repo):
    result = runner.invoke(app, ["--repo", git_repo.working_dir])

    assert result.exit_code == 0
    assert "No changes to commit" in result.output


def test_declined_staging_via_stdin(git_repo):
    (Path(git_repo.working_dir) / "README.md").write_text("edited\n")

    result = runner.invoke(app, ["--repo", git_repo.working_dir], input="n\n")

    assert result.exit_code == 0
    assert "Staging cancelled" in result.output
    assert git_repo.index.diff("HEAD") == []


def test_ctrl_c_at_stage_prompt_stages_nothing(git_repo):
    work = Path(git_repo.working_dir)
    (work / "README.md").write_text("edited\n")
    (work / "new.txt").write_text("hello\n")
    handlers = []

    def interrupt(self, message, default=True):
        handlers.append(signal.getsignal(signal.SIGINT))
        raise KeyboardInterrupt

    with patch.object(DevPilotConsole, "confirm_action", interrupt):
        result = runner.invoke(app, ["--repo", str(work)])

    assert result.exit_code == 130
    assert "cancelled" in result.output
    assert handlers == [signal.default_int_handler]
    assert git_repo.index.diff("HEAD") == []
    assert "new.txt" in git_repo.untracked_files


def test_config_show_reflects_environment(monkeypatch):
    monkeypatch.setenv("DEVPILOT_GENERATOR__TIMEOUT", "30")

    result = runner.invoke(app, ["config", "--show"])

    assert result.exit_code == 0
    assert "Timeout: 30s" in result.output
    assert "Command: gemini" in result.output


def test_config_file_option(tmp_path):
    config_file = tmp_path / "devpilot.json"
    config_file.write_text(json.dumps({"generator": {"backend_type": "ollama", "model": "llama3"}}))

    result = runner.invoke(app, ["--config", str(config_file), "config", "--show"])

    assert result.exit_code == 0
    assert "Backend: ollama" in result.output
    assert "Model: llama3" in result.output


def test_invalid_configuration_exits_one(tmp_path):
    config_file = tmp_path / "devpilot.json"
    config_file.write_text(json.dumps({"generator": {"timeout": -5}}))

    result = runner.invoke(app, ["--config", str(config_file), "config", "--show"])

    assert result.exit_code == 1
    assert "Configuration error" in result.output


def test_config_save_writes_user_config(tmp_path):
    result = runner.invoke(app, ["config", "--save"])

    assert result.exit_code == 0
    saved = json.loads((tmp_path / "config" / "devpilot" / "config.json").read_text())
    assert saved["generator"]["command"] == ["gemini"]


def test_test_command_reports_missing_tool(monkeypatch):
    monkeypatch.setenv("DEVPILOT_GENERATOR__COMMAND", '["devpilot-no-such-ai-tool"]')

    result = runner.invoke(app, ["test"])

    assert result.exit_code == 1
    assert "unavailable" in result.output


def test_scaffold_passes_options():
    with patch("devpilot.cli.ViteScaffolder") as scaffolder_cls:
        result = runner.invoke(app, ["scaffold", "my-app", "--no-dev", "--no-browser"])

    assert result.exit_code == 0
    scaffolder_cls.return_value.run.assert_called_once_with(
        name="my-app",
        template=None,
        open_editor=True,
        open_browser=False,
        start_dev=False,
    )


def test_scaffold_failure_uses_tool_exit_status():
    scaffolder = MagicMock()
    scaffolder.run.side_effect = ScaffoldError("npm install failed with exit status 3", exit_code=3)

    with patch("devpilot.cli.ViteScaffolder", return_value=scaffolder):
        result = runner.invoke(app, ["scaffold", "my-app"])

    assert result.exit_code == 3
    assert "npm install failed" in result.output


def test_piped_manual_message_then_push_at_end_of_input(git_repo, remote_repo, monkeypatch):
    monkeypatch.setenv("DEVPILOT_GENERATOR__COMMAND", json.dumps([sys.executable, "-c", "import sys; sys.exit(1)"]))
    work = Path(git_repo.working_dir)
    (work / "README.md").write_text("edited\n")

    result = runner.invoke(app, ["--repo", str(work)], input="y\ny\nfeat: piped message\n")

    assert result.exit_code == 0, result.output
    assert git_repo.head.commit.message == "feat: piped message\n"
    branch = git_repo.active_branch.name
    assert remote_repo.commit(branch).hexsha == git_repo.head.commit.hexsha
