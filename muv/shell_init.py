"""Installing the muv shell function into bash or zsh start-up files."""

from __future__ import annotations

import os
import shutil
import sys
from pathlib import Path

from muv.errors import MuvError

MUV_INIT_BLOCK_START = "# MUV INIT START"
MUV_INIT_BLOCK_END = "# MUV INIT END"
FUNCTIONS_FILE_NAME = ".muv-functions.sh"

_SHELL_CONFIG_FILES = {"bash": ".bashrc", "zsh": ".zshrc"}
_EXE_MARKER = "__MUV_EXE_PATH__"

_FUNCTION_TEMPLATE = """# MUV shell functions
# This file contains shell functions for the muv tool

muv() {
    local cmd="$1"
    local output
    local ret_code

    # Always use the exact binary path to avoid recursion
    local muv_exe_path="__MUV_EXE_PATH__"

    # Fall back to MUV_BINARY_PATH if the default path doesn't exist
    if [ ! -x "$muv_exe_path" ] && [ -n "$MUV_BINARY_PATH" ] && [ -x "$MUV_BINARY_PATH" ]; then
        muv_exe_path="$MUV_BINARY_PATH"
    fi

    # Check if we have a valid executable
    if [ ! -x "$muv_exe_path" ]; then
        echo "Error: muv executable not found at $muv_exe_path" >&2
        echo "Please set MUV_BINARY_PATH to the full path of the muv binary." >&2
        return 1
    fi

    case "$cmd" in
        activate)
            if [ -z "$2" ]; then
                echo "Usage: muv activate <environment_name>" >&2
                "$muv_exe_path" activate --help
                return 1
            fi
            shift
            output="$("$muv_exe_path" activate "$@" 2> >(tee /dev/stderr >&2))"
            ret_code=$?

            if [ $ret_code -eq 0 ] && [ -n "$output" ]; then
                eval "$output"
                return $?
            elif [ $ret_code -ne 0 ]; then
                return $ret_code
            else
                echo "muv: activation command produced no output or an error occurred." >&2
                return 1
            fi
            ;;
        deactivate)
            if declare -f -F deactivate > /dev/null && [ -n "$MUV_ENV_NAME" ]; then
                 deactivate
                 return $?
            fi
            shift
            output="$("$muv_exe_path" deactivate "$@" 2> >(tee /dev/stderr >&2))"
            ret_code=$?
            if [ $ret_code -eq 0 ] && [ -n "$output" ]; then
                eval "$output"
                return $?
            elif [ $ret_code -ne 0 ]; then
                return $ret_code
            else
                echo "muv: deactivation command produced no output or an error occurred." >&2
                return 1
            fi
            ;;
        *)
            "$muv_exe_path" "$@"
            return $?
            ;;
    esac
}"""

_INIT_BLOCK_TEMPLATE = """
# MUV INIT START
# This block was auto-generated by 'muv init'.
# To re-generate, run 'muv init --force'.

# Set this to the path of your muv binary if it's not in your PATH
export MUV_BINARY_PATH="__MUV_EXE_PATH__"

# Source the muv functions from separate file
[ -f "$HOME/.muv-functions.sh" ] && source "$HOME/.muv-functions.sh"
# MUV INIT END
"""


def _home_dir() -> Path:
    try:
        return Path.home()
    except (RuntimeError, KeyError) as exc:
        raise MuvError("Could not find home directory") from exc


def _escape(path: str | os.PathLike[str]) -> str:
    return os.fspath(path).replace("\\", "\\\\").replace('"', '\\"')


def _current_executable() -> Path:
    argv0 = Path(sys.argv[0]) if sys.argv and sys.argv[0] else None
    if argv0 is not None and argv0.is_file():
        return argv0.resolve()
    found = shutil.which("muv")
    if found:
        return Path(found).resolve()
    raise MuvError(
        "Failed to get current executable path. Please ensure muv is in your PATH "
        "or provide the full path."
    )


def get_shell_config_path() -> tuple[str, Path]:
    """Return the detected shell's name and its start-up file."""
    shell_path = os.environ.get("SHELL", "/bin/bash")
    shell_name = (Path(shell_path).name or "bash").lower()
    home = _home_dir()
    config_name = _SHELL_CONFIG_FILES.get(shell_name)
    if config_name is None:
        raise MuvError(
            f"Unsupported shell: {shell_name}. MUV init currently supports bash and zsh."
        )
    return shell_name, home / config_name


def muv_function_content(exe_path: str | os.PathLike[str]) -> str:
    """Return the shell function definition that wraps the muv executable."""
    return _FUNCTION_TEMPLATE.replace(_EXE_MARKER, _escape(exe_path))


def shell_script_content(exe_path: str | os.PathLike[str]) -> str:
    """Return the block appended to the shell start-up file."""
    return _INIT_BLOCK_TEMPLATE.replace(_EXE_MARKER, _escape(exe_path))


def is_muv_initialized(content: str) -> bool:
    """Tell whether the text already holds a muv init block."""
    return MUV_INIT_BLOCK_START in content and MUV_INIT_BLOCK_END in content


def _lines(content: str) -> list[str]:
    if not content:
        return []
    parts = content.split("\n")
    if content.endswith("\n"):
        parts.pop()
    return [part.removesuffix("\r") for part in parts]


def remove_existing_muv_block(content: str) -> str:
    """Return the text with every muv init block and its markers removed."""
    kept: list[str] = []
    in_block = False
    for line in _lines(content):
        stripped = line.strip()
        if stripped == MUV_INIT_BLOCK_START:
            in_block = True
            continue
        if stripped == MUV_INIT_BLOCK_END:
            in_block = False
            continue
        if not in_block:
            kept.append(line + "\n")
    result = "".join(kept)
    if not content.endswith("\n") and result.endswith("\n"):
        result = result[:-1]
    return result


def handle_init(force: bool = False) -> Path:
    """Write the functions file and hook it into the shell start-up file."""
    shell_name, config_path = get_shell_config_path()
    functions_path = _home_dir() / FUNCTIONS_FILE_NAME

    print(f"Detected shell: {shell_name} (config file: {config_path})")

    if config_path.exists():
        try:
            config_content = config_path.read_text(encoding="utf-8")
        except OSError as exc:
            raise MuvError(f"Failed to read shell config file: {config_path}") from exc
    else:
        print(f"Shell config file {config_path} does not exist. It will be created.")
        config_content = ""

    if is_muv_initialized(config_content):
        if not force:
            print(f"MUV seems to be already initialized in {config_path}.")
            print("To re-initialize, run 'muv init --force'.")
            print("To apply changes, please source your shell config or open a new terminal:")
            print(f"  source {config_path}")
            return config_path
        print("MUV seems to be already initialized. --force specified, re-initializing...")
        config_content = remove_existing_muv_block(config_content)

    exe_path = _current_executable()
    try:
        functions_path.write_text(muv_function_content(exe_path), encoding="utf-8")
    except OSError as exc:
        raise MuvError(f"Failed to write to {functions_path}") from exc

    if config_content and not config_content.endswith("\n"):
        config_content += "\n"
    config_content += shell_script_content(exe_path)
    if not config_content.endswith("\n"):
        config_content += "\n"

    try:
        config_path.write_text(config_content, encoding="utf-8")
    except OSError as exc:
        raise MuvError(f"Failed to write to {config_path}") from exc

    print(f"\nMUV initialization script added to {config_path}.")
    print(f"MUV functions written to {functions_path}.")
    print("Please source your shell config file or open a new terminal to apply changes:")
    print(f"  source {config_path}")
    print("\nAfter that, you can use 'muv activate <env>' and 'muv deactivate' directly.")
    return config_path