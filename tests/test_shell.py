import asyncio
import sys
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from steward_action.util.shell import run_cmd, stream_cmd, which


def test_run_cmd_success(tmp_path):
    stdout = tmp_path / "out.log"
    stderr = tmp_path / "err.log"

    res = run_cmd("echo 'hello'", tmp_path, stdout, stderr)

    assert res.returncode == 0
    assert "hello" in stdout.read_text()
    assert res.stdout_text.strip() == "hello"
    assert res.stdout_bytes > 0
    assert res.elapsed_s >= 0


def test_run_cmd_failure(tmp_path):
    res = run_cmd("false", tmp_path, tmp_path / "out.log", tmp_path / "err.log")
    assert res.returncode != 0


@pytest.mark.timeout(5)
def test_run_cmd_timeout(tmp_path):
    stderr = tmp_path / "err.log"
    res = run_cmd("sleep 2", tmp_path, tmp_path / "out.log", stderr, timeout_s=0.5)
    assert res.returncode == 124
    assert "Timeout expired" in stderr.read_text()


def test_run_cmd_stderr_tail(tmp_path):
    res = run_cmd(
        "printf 'one\\ntwo\\nthree\\n' >&2", tmp_path, tmp_path / "out.log", tmp_path / "err.log"
    )
    assert res.returncode == 0
    assert res.stderr_tail(lines=2) == "two\nthree"


def test_run_cmd_list_mode(tmp_path):
    with patch("subprocess.run") as mock_run:
        mock_run.return_value = MagicMock(returncode=0)
        run_cmd(["ls", "-l"], tmp_path)

        args, kwargs = mock_run.call_args
        assert args[0] == ["ls", "-l"]
        assert kwargs["shell"] is False
        assert kwargs["cwd"] == str(tmp_path)
        assert kwargs["env"] is None


def test_run_cmd_env_overlay(tmp_path, monkeypatch):
    monkeypatch.setenv("KEEP_ME", "1")
    res = run_cmd(
        'echo "$KEEP_ME-$EXTRA"', tmp_path, tmp_path / "out.log", tmp_path / "err.log",
        env={"EXTRA": "2"},
    )
    assert res.stdout_text.strip() == "1-2"


def test_run_cmd_missing_binary(tmp_path):
    res = run_cmd(["definitely-not-a-binary-xyz"], tmp_path, tmp_path / "o", tmp_path / "e")
    assert res.returncode == 127


def test_stream_cmd_exit_code(tmp_path):
    assert asyncio.run(stream_cmd([sys.executable, "-c", "raise SystemExit(3)"])) == 3
    assert asyncio.run(stream_cmd(["definitely-not-a-binary-xyz"])) == 127


def test_which_extra_dirs(tmp_path, monkeypatch):
    monkeypatch.setenv("PATH", "")
    tool = tmp_path / "bin" / "cs"
    tool.parent.mkdir()
    tool.write_text("#!/bin/sh\n")
    assert which("cs") is None
    assert which("cs", [tmp_path / "bin"]) is None  # not executable yet
    tool.chmod(0o755)
    assert which("cs", [tmp_path / "bin"]) == str(tool)
    assert which("cs", [Path("/nonexistent")]) is None
