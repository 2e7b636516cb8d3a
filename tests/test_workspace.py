from unittest.mock import patch

from privatelab.runner import CommandRunner
from privatelab.workspace import chown_command, clone_repository


def test_chown_command_uses_login_group(tmp_path):
    assert chown_command("alice", tmp_path) == ["chown", "-R", "alice:", str(tmp_path)]


def test_clone_url(tmp_path, completed):
    with patch("subprocess.run", return_value=completed(0)) as mock_run, patch(
        "privatelab.workspace.cli_logger"
    ) as logger:
        result = clone_repository("https://github.com/org/repo.git", tmp_path, CommandRunner())

    assert result.ok
    assert mock_run.call_args.kwargs["cwd"] == tmp_path
    assert logger.info.call_count == 1


def test_clone_scp_style_location(tmp_path, completed):
    with patch("subprocess.run", return_value=completed(0)) as mock_run, patch(
        "privatelab.workspace.cli_logger"
    ) as logger:
        clone_repository("git@github.com:org/repo.git", tmp_path, CommandRunner())

    assert mock_run.call_args.args[0] == ["git", "clone", "git@github.com:org/repo.git"]
    messages = [call.args[0] for call in logger.info.call_args_list]
    assert any("scp-style" in message for message in messages)
