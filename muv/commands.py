"""Environment commands: create, list, delete, packages, run and friends."""

from __future__ import annotations

import os
import shutil
import subprocess
import tomllib
from collections.abc import Iterable, Sequence
from pathlib import Path

from muv import utils
from muv.errors import (
    DeletionNotConfirmedError,
    EnvironmentAlreadyExistsError,
    MuvError,
    TomlParseError,
)


def _status_text(returncode: int) -> str:
    if returncode < 0:
        return f"signal: {-returncode}"
    return f"exit status: {returncode}"


def _venv_vars(env_path: Path) -> dict[str, Path]:
    return {utils.ACTIVE_ENV_VAR: env_path}


def list_environments() -> list[str]:
    """Return the names of all environments, sorted."""
    envs_dir = utils.get_envs_dir()
    return sorted(
        entry.name
        for entry in envs_dir.iterdir()
        if entry.is_dir() and (entry / "pyvenv.cfg").exists()
    )


def handle_create(
    name: str, python: str | None = None, packages: Iterable[str] | None = None
) -> Path:
    """Create a new environment and optionally install packages into it."""
    env_path = utils.get_env_path(name)
    if env_path.exists():
        raise EnvironmentAlreadyExistsError(name)

    env_path.mkdir(parents=True)
    print(f"Creating environment '{name}' at {env_path}")

    uv_args = ["venv"]
    if python is not None:
        uv_args += ["--python", python]
    uv_args.append(str(env_path))
    utils.run_uv_command(uv_args)

    print(f"Environment '{name}' created successfully.")

    if packages is not None:
        pkgs = list(packages)
        print(f"Installing package(s) [{', '.join(pkgs)}] into environment '{name}'...")
        utils.run_uv_command(["pip", "install", *pkgs], env_vars=_venv_vars(env_path))
        print(f"Package(s) installed successfully in '{name}'.")

    print(f'To activate, run: eval "$(muv activate {name})"')
    return env_path


def handle_list() -> list[str]:
    """Print the available environments and return their names."""
    envs_dir = utils.get_envs_dir()
    print(f"Available GUV environments (in {envs_dir}):")
    names = list_environments()
    for env_name in names:
        print(f"- {env_name}")
    if not names:
        print("No environments found. Use 'guv create <name>' to create one.")
    return names


def _confirm(question: str) -> bool:
    print(question, end="", flush=True)
    try:
        answer = input()
    except EOFError:
        answer = ""
    return answer.strip().lower() == "y"


def handle_delete(name: str, yes: bool = False) -> None:
    """Delete an environment, asking first unless ``yes`` is set."""
    env_path = utils.ensure_env_exists(name)
    if not yes and not _confirm(
        f"Are you sure you want to delete environment '{name}' at {env_path}? [y/N]: "
    ):
        raise DeletionNotConfirmedError()

    print(f"Deleting environment '{name}'...")
    shutil.rmtree(env_path)
    print(f"Environment '{name}' deleted successfully.")


def _toml_dependencies(toml_file: str | os.PathLike[str]) -> list[str]:
    text = Path(toml_file).read_text(encoding="utf-8")
    try:
        document = tomllib.loads(text)
    except tomllib.TOMLDecodeError as exc:
        raise TomlParseError(str(exc)) from exc
    project = document.get("project")
    if not isinstance(project, dict):
        return []
    deps = project.get("dependencies")
    if not isinstance(deps, list):
        return []
    return [dep for dep in deps if isinstance(dep, str)]


def handle_install(
    env_name: str | None = None,
    packages: Sequence[str] = (),
    requirements: str | None = None,
    toml_file: str | None = None,
) -> None:
    """Install packages, a requirements file or pyproject dependencies."""
    env_path, name = utils.get_active_or_specified_env(env_name)
    env_vars = _venv_vars(env_path)

    if requirements is not None:
        print(f"Installing dependencies from '{requirements}' into environment '{name}'...")
        utils.run_uv_command(["pip", "install", "-r", requirements], env_vars=env_vars)
        print(f"Dependencies from '{requirements}' installed successfully in '{name}'.")

    if toml_file is not None:
        print(f"Installing dependencies from '{toml_file}' into environment '{name}'...")
        deps = _toml_dependencies(toml_file)
        if deps:
            utils.run_uv_command(["pip", "install", *deps], cwd=env_path, env_vars=env_vars)
        print(f"Dependencies from pyproject.toml installed successfully in '{name}'.")

    if packages:
        print(f"Installing package(s) [{', '.join(packages)}] into environment '{name}'...")
        utils.run_uv_command(["pip", "install", *packages], env_vars=env_vars)
        print(f"Package(s) installed successfully in '{name}'.")

    if requirements is None and toml_file is None and not packages:
        print("Nothing to install. Please specify packages or --requirements or --toml.")


def handle_uninstall(env_name: str | None = None, packages: Sequence[str] = ()) -> None:
    """Uninstall packages from the active or named environment."""
    env_path, name = utils.get_active_or_specified_env(env_name)
    print(f"Uninstalling package(s) [{', '.join(packages)}] from environment '{name}'...")
    utils.run_uv_command(["pip", "uninstall", *packages], env_vars=_venv_vars(env_path))
    print(f"Package(s) uninstalled successfully from '{name}'.")


def handle_freeze(name: str | None = None) -> str:
    """Print the installed packages in requirements format and return them."""
    env_path, _ = utils.get_active_or_specified_env(name)
    output = utils.get_command_output(
        "uv", ["pip", "freeze"], env_vars=_venv_vars(env_path)
    )
    print(output, end="")
    return output


def handle_path(name: str | None = None) -> Path:
    """Print and return the path of the active or named environment."""
    env_path, _ = utils.get_active_or_specified_env(name)
    print(env_path)
    return env_path


def handle_home() -> Path:
    """Print and return the muv home directory."""
    home = utils.get_muv_home()
    print(home)
    return home


def handle_run(env_name: str, command: Sequence[str]) -> None:
    """Run a command with the environment's interpreter or scripts."""
    env_path = utils.ensure_env_exists(env_name)
    bin_dir = env_path / "bin"
    python_exe = bin_dir / "python"
    if not python_exe.exists():
        raise MuvError(
            f"Python interpreter not found at {python_exe}. Environment might be corrupted."
        )
    if not command:
        raise MuvError("No command provided to run")

    program, *args = command
    in_venv = bin_dir / program
    if program.lower() == "python":
        executable = python_exe
    elif in_venv.is_file():
        executable = in_venv
    else:
        executable = Path(program)

    shown = f"{executable} {' '.join(args)}"
    print(f"Running in environment '{env_name}': {shown}")

    env = dict(os.environ)
    env[utils.ACTIVE_ENV_VAR] = str(env_path)
    try:
        result = subprocess.run([os.fspath(executable), *args], env=env, check=False)
    except OSError as exc:
        raise MuvError(f"Failed to execute command: '{shown}': {exc}") from exc
    if result.returncode != 0:
        raise MuvError(
            f"Command '{shown}' failed with status: {_status_text(result.returncode)}"
        )