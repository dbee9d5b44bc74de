"""Locating environments and running uv."""

from __future__ import annotations

import os
import subprocess
from collections.abc import Mapping, Sequence
from pathlib import Path

import platformdirs

from muv.errors import (
    EnvironmentNotFoundError,
    HomeDirError,
    MuvError,
    UvCommandFailedError,
    UvNotInstalledError,
)

ACTIVE_ENV_VAR = "VIRTUAL_ENV"
MUV_ACTIVE_ENV_NAME_VAR = "MUV_ENV_NAME"
MUV_HOME_VAR = "MUV_HOME"

EnvVars = Mapping[str, "str | os.PathLike[str]"]

_PYPROJECT_TEMPLATE = """[project]
name = "muv-environment"
version = "0.1.0"
description = "A Python environment managed by MUV."
requires-python = ">=3.8"

[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"
"""


def get_muv_home() -> Path:
    """Return the muv home directory, honouring MUV_HOME."""
    override = os.environ.get(MUV_HOME_VAR)
    if override is not None:
        return Path(override)
    try:
        base = Path(platformdirs.user_data_dir())
    except Exception:
        try:
            base = Path.home()
        except (RuntimeError, KeyError) as exc:
            raise HomeDirError() from exc
    return base / ".muv"


def get_envs_dir() -> Path:
    """Return the directory holding environments, creating it if needed."""
    path = get_muv_home() / "envs"
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_env_path(name: str) -> Path:
    """Return the path an environment with this name lives at."""
    return get_envs_dir() / name


def ensure_env_exists(name: str) -> Path:
    """Return the environment's path, or raise if it is not a virtualenv."""
    path = get_env_path(name)
    if not path.exists() or not (path / "pyvenv.cfg").exists():
        raise EnvironmentNotFoundError(name)
    return path


def _describe_status(returncode: int) -> str:
    if returncode < 0:
        return f"signal: {-returncode}"
    return f"exit status: {returncode}"


def _build_env(env_vars: EnvVars | None) -> dict[str, str] | None:
    if not env_vars:
        return None
    env = dict(os.environ)
    env.update({key: os.fspath(value) for key, value in env_vars.items()})
    return env


def check_uv_exists() -> None:
    """Raise unless ``uv --version`` runs successfully."""
    try:
        result = subprocess.run(
            ["uv", "--version"],
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            check=False,
        )
    except OSError as exc:
        raise UvCommandFailedError(f"Failed to execute uv: {exc}") from exc
    if result.returncode != 0:
        raise UvNotInstalledError("uv")


def run_uv_command(
    args: Sequence[str],
    cwd: str | os.PathLike[str] | None = None,
    env_vars: EnvVars | None = None,
) -> None:
    """Run uv with the given arguments, inheriting stdio."""
    try:
        result = subprocess.run(
            ["uv", *args], cwd=cwd, env=_build_env(env_vars), check=False
        )
    except OSError as exc:
        raise UvCommandFailedError(f"Failed to execute uv: {exc}") from exc
    if result.returncode != 0:
        raise UvCommandFailedError(
            f"uv {' '.join(args)} failed with status: {_describe_status(result.returncode)}"
        )


def get_command_output(
    program: str,
    args: Sequence[str],
    cwd: str | os.PathLike[str] | None = None,
    env_vars: EnvVars | None = None,
) -> str:
    """Run a program and return its standard output as text."""
    try:
        result = subprocess.run(
            [program, *args],
            cwd=cwd,
            env=_build_env(env_vars),
            capture_output=True,
            check=False,
        )
    except OSError as exc:
        raise UvCommandFailedError(f"Failed to execute {program}: {exc}") from exc
    if result.returncode != 0:
        stderr = result.stderr.decode("utf-8", errors="replace")
        raise UvCommandFailedError(
            f"{program} {' '.join(args)} failed with status: "
            f"{_describe_status(result.returncode)}. Stderr: {stderr}"
        )
    try:
        return result.stdout.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise UvCommandFailedError(f"Failed to parse output as UTF-8: {exc}") from exc


def create_basic_pyproject_toml(project_path: str | os.PathLike[str]) -> Path:
    """Write a minimal pyproject.toml into the directory and return its path."""
    target = Path(project_path) / "pyproject.toml"
    target.write_text(_PYPROJECT_TEMPLATE, encoding="utf-8")
    return target


def get_active_or_specified_env(env_name: str | None = None) -> tuple[Path, str]:
    """Resolve the environment to act on: the active one or the named one."""
    active_path = os.environ.get(ACTIVE_ENV_VAR)
    active_name = os.environ.get(MUV_ACTIVE_ENV_NAME_VAR)
    if active_path is not None and active_name is not None:
        env_path = Path(active_path)
        envs_dir = get_envs_dir()
        is_muv_env = (
            env_path.is_relative_to(envs_dir)
            and env_path.name == active_name
            and (env_path / "pyvenv.cfg").exists()
        )
        if is_muv_env:
            if env_name is not None and env_name != active_name:
                raise MuvError(
                    f"An environment ('{active_name}') is already active, but you "
                    f"specified a different one ('{env_name}').\n"
                    "Deactivate the current environment or omit the environment name argument."
                )
            print(f"Using active MUV environment: {active_name}")
            return env_path, active_name
        if env_name is None:
            raise MuvError(
                f"A virtual environment is active (VIRTUAL_ENV={env_path}), but it does "
                "not appear to be a MUV-managed environment or MUV_ENV_NAME is not "
                "set/inconsistent.\n"
                "Please specify a MUV environment name or activate a MUV environment."
            )

    if env_name is not None:
        return ensure_env_exists(env_name), env_name

    raise MuvError(
        "No MUV environment is active, and no environment name was specified.\n"
        "Use 'muv activate <n>' or provide the environment name to the command."
    )