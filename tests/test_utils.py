import subprocess
import sys
import tomllib
from pathlib import Path
from unittest.mock import patch

import pytest

from muv import utils
from muv.errors import (
    EnvironmentNotFoundError,
    MuvError,
    UvCommandFailedError,
    UvNotInstalledError,
)


@pytest.fixture
def muv_home(tmp_path, monkeypatch):
    home = tmp_path / ".muv"
    monkeypatch.setenv("MUV_HOME", str(home))
    monkeypatch.delenv("VIRTUAL_ENV", raising=False)
    monkeypatch.delenv("MUV_ENV_NAME", raising=False)
    return home


def _make_env(home: Path, name: str) -> Path:
    path = home / "envs" / name
    path.mkdir(parents=True)
    (path / "pyvenv.cfg").write_text("home = /usr/bin\n")
    return path


def test_get_muv_home_with_env_var(monkeypatch):
    monkeypatch.setenv("MUV_HOME", "/tmp/muv_test_home")
    assert utils.get_muv_home() == Path("/tmp/muv_test_home")


def test_get_muv_home_default(monkeypatch):
    monkeypatch.delenv("MUV_HOME", raising=False)
    home = utils.get_muv_home()
    assert home.name == ".muv"
    assert home.is_absolute()


def test_get_envs_dir_creates_directory(muv_home):
    envs_dir = utils.get_envs_dir()
    assert envs_dir == muv_home / "envs"
    assert envs_dir.is_dir()


def test_get_env_path(muv_home):
    assert utils.get_env_path("test_env") == muv_home / "envs" / "test_env"


def test_ensure_env_exists_fails_for_nonexistent(muv_home):
    with pytest.raises(EnvironmentNotFoundError, match="nonexistent_env"):
        utils.ensure_env_exists("nonexistent_env")


def test_ensure_env_exists_requires_pyvenv_cfg(muv_home):
    (muv_home / "envs" / "bare").mkdir(parents=True)
    with pytest.raises(EnvironmentNotFoundError):
        utils.ensure_env_exists("bare")


def test_ensure_env_exists_returns_path(muv_home):
    path = _make_env(muv_home, "good")
    assert utils.ensure_env_exists("good") == path


def test_check_uv_exists_success():
    with patch("subprocess.run") as run:
        run.return_value = subprocess.CompletedProcess(["uv", "--version"], 0)
        assert utils.check_uv_exists() is None
    assert run.call_args.args[0] == ["uv", "--version"]


def test_check_uv_exists_nonzero_status():
    with patch("subprocess.run") as run:
        run.return_value = subprocess.CompletedProcess(["uv", "--version"], 1)
        with pytest.raises(UvNotInstalledError, match="'uv'"):
            utils.check_uv_exists()


def test_check_uv_exists_missing_binary():
    with patch("subprocess.run", side_effect=FileNotFoundError("no uv")):
        with pytest.raises(UvCommandFailedError, match="Failed to execute uv"):
            utils.check_uv_exists()


def test_run_uv_command_passes_args_and_env(tmp_path):
    with patch("subprocess.run") as run:
        run.return_value = subprocess.CompletedProcess([], 0)
        utils.run_uv_command(
            ["pip", "install", "requests"], tmp_path, {"VIRTUAL_ENV": tmp_path}
        )
    call = run.call_args
    assert call.args[0] == ["uv", "pip", "install", "requests"]
    assert call.kwargs["cwd"] == tmp_path
    assert call.kwargs["env"]["VIRTUAL_ENV"] == str(tmp_path)


def test_run_uv_command_failure_message():
    with patch("subprocess.run") as run:
        run.return_value = subprocess.CompletedProcess([], 2)
        with pytest.raises(UvCommandFailedError) as info:
            utils.run_uv_command(["pip", "install", "x"])
    assert "uv pip install x failed with status: exit status: 2" in str(info.value)


def test_get_command_output_returns_stdout():
    assert utils.get_command_output(sys.executable, ["-c", "print('hi')"]) == "hi\n"


def test_get_command_output_sets_env(tmp_path):
    out = utils.get_command_output(
        sys.executable,
        ["-c", "import os; print(os.environ['VIRTUAL_ENV'])"],
        None,
        {"VIRTUAL_ENV": tmp_path},
    )
    assert out.strip() == str(tmp_path)


def test_get_command_output_uses_cwd(tmp_path):
    out = utils.get_command_output(
        sys.executable, ["-c", "import os; print(os.getcwd())"], tmp_path
    )
    assert Path(out.strip()).resolve() == tmp_path.resolve()


def test_get_command_output_failure():
    with pytest.raises(UvCommandFailedError) as info:
        utils.get_command_output(
            sys.executable, ["-c", "import sys; sys.stderr.write('boom'); sys.exit(3)"]
        )
    message = str(info.value)
    assert "exit status: 3" in message
    assert "Stderr: boom" in message


def test_get_command_output_missing_program():
    with pytest.raises(UvCommandFailedError, match="Failed to execute"):
        utils.get_command_output("definitely-not-a-real-program-xyz", [])


def test_get_command_output_invalid_utf8():
    with pytest.raises(UvCommandFailedError, match="UTF-8"):
        utils.get_command_output(
            sys.executable, ["-c", "import sys; sys.stdout.buffer.write(b'\\xff\\xfe')"]
        )


def test_create_basic_pyproject_toml(tmp_path):
    target = utils.create_basic_pyproject_toml(tmp_path)
    assert target == tmp_path / "pyproject.toml"
    data = tomllib.loads(target.read_text())
    assert data["project"]["name"] == "muv-environment"
    assert data["project"]["requires-python"] == ">=3.8"
    assert data["build-system"]["build-backend"] == "hatchling.build"


def test_specified_env_without_active(muv_home):
    path = _make_env(muv_home, "demo")
    assert utils.get_active_or_specified_env("demo") == (path, "demo")


def test_specified_env_missing(muv_home):
    with pytest.raises(EnvironmentNotFoundError):
        utils.get_active_or_specified_env("missing")


def test_nothing_active_nothing_specified(muv_home):
    with pytest.raises(MuvError, match="No MUV environment is active"):
        utils.get_active_or_specified_env()


def test_active_env_is_used(muv_home, monkeypatch, capsys):
    path = _make_env(muv_home, "act")
    monkeypatch.setenv("VIRTUAL_ENV", str(path))
    monkeypatch.setenv("MUV_ENV_NAME", "act")
    assert utils.get_active_or_specified_env() == (path, "act")
    assert "Using active MUV environment: act" in capsys.readouterr().out


def test_active_env_conflicts_with_argument(muv_home, monkeypatch):
    path = _make_env(muv_home, "act")
    _make_env(muv_home, "other")
    monkeypatch.setenv("VIRTUAL_ENV", str(path))
    monkeypatch.setenv("MUV_ENV_NAME", "act")
    with pytest.raises(MuvError, match="already active"):
        utils.get_active_or_specified_env("other")


def test_foreign_venv_without_name(muv_home, monkeypatch, tmp_path):
    monkeypatch.setenv("VIRTUAL_ENV", str(tmp_path / "elsewhere"))
    monkeypatch.setenv("MUV_ENV_NAME", "elsewhere")
    with pytest.raises(MuvError, match="does not appear to be a MUV-managed"):
        utils.get_active_or_specified_env()


def test_foreign_venv_with_name_falls_back(muv_home, monkeypatch, tmp_path):
    path = _make_env(muv_home, "mine")
    monkeypatch.setenv("VIRTUAL_ENV", str(tmp_path / "elsewhere"))
    monkeypatch.setenv("MUV_ENV_NAME", "elsewhere")
    assert utils.get_active_or_specified_env("mine") == (path, "mine")