from pathlib import Path

import pytest

from muv import activation
from muv.errors import EnvironmentNotFoundError


@pytest.fixture
def muv_home(tmp_path, monkeypatch):
    home = tmp_path / ".muv"
    (home / "envs").mkdir(parents=True)
    monkeypatch.setenv("MUV_HOME", str(home))
    monkeypatch.delenv("VIRTUAL_ENV", raising=False)
    monkeypatch.delenv("MUV_ENV_NAME", raising=False)
    return home


def test_activate_script_exports():
    script = activation.activate_script(Path("/envs/demo"), "demo")
    lines = script.splitlines()
    assert 'export PATH="/envs/demo/bin:$PATH"' in lines
    assert 'export VIRTUAL_ENV="/envs/demo"' in lines
    assert 'export MUV_ENV_NAME="demo"' in lines
    assert 'if [ -n "${PS1+x}" ]; then PS1="(demo) $PS1"; else PS1="(demo) "; fi' in lines


def test_activate_script_saves_state_first_and_ends_with_marker():
    lines = activation.activate_script("/envs/demo", "demo").splitlines()
    assert lines[0] == 'if [ -z "$MUV_OLD_PATH" ]; then export MUV_OLD_PATH="$PATH"; fi'
    assert lines[-1] == ": # MUV activation successful marker"


def test_activate_script_defines_deactivate_function():
    script = activation.activate_script("/envs/demo", "demo")
    assert "deactivate() {" in script
    assert "unset -f deactivate" in script
    assert "function _muv_saved_deactivate() {" in script


def test_deactivate_script_contents():
    script = activation.deactivate_script()
    lines = script.splitlines()
    assert lines[0] == "# Check if MUV environment is active"
    assert "unset VIRTUAL_ENV" in lines
    assert "unset MUV_ENV_NAME" in lines
    assert lines[-1] == ": # MUV deactivation successful marker"


def test_activate_nonexistent_environment(muv_home):
    with pytest.raises(EnvironmentNotFoundError) as info:
        activation.handle_activate("nonexistent_env")
    assert "not found" in str(info.value)


def test_handle_activate_prints_script(muv_home, capsys):
    env_path = muv_home / "envs" / "demo"
    env_path.mkdir()
    (env_path / "pyvenv.cfg").write_text("home = /usr/bin\n")
    activation.handle_activate("demo")
    out = capsys.readouterr().out
    assert f'export VIRTUAL_ENV="{env_path}"' in out
    assert out.rstrip().endswith(": # MUV activation successful marker")


def test_handle_deactivate_prints_script(capsys):
    activation.handle_deactivate()
    out = capsys.readouterr().out
    assert "unset VIRTUAL_ENV" in out
    assert out.rstrip().endswith(": # MUV deactivation successful marker")