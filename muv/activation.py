"""Shell snippets that activate and deactivate environments when evaluated."""

from __future__ import annotations

import os
from pathlib import Path

from muv import utils

_DEACTIVATE_FUNCTION = """
if declare -f -F deactivate > /dev/null; then
    eval "$(echo "function _muv_saved_deactivate() {"; declare -f deactivate | tail -n +2; echo "}")"
fi

deactivate() {
    # Restore PS1
    if [ -n "${MUV_OLD_PS1+x}" ]; then
        export PS1="$MUV_OLD_PS1"
        unset MUV_OLD_PS1
    else
        unset PS1 # Or set to a default
    fi

    # Restore PATH
    if [ -n "${MUV_OLD_PATH+x}" ]; then
        export PATH="$MUV_OLD_PATH"
        unset MUV_OLD_PATH
    fi

    # Restore PYTHONHOME if it was saved
    if [ -n "${_MUV_OLD_VIRTUAL_PYTHONHOME+x}" ] ; then
        export PYTHONHOME="$_MUV_OLD_VIRTUAL_PYTHONHOME"
        unset _MUV_OLD_VIRTUAL_PYTHONHOME
    fi

    unset VIRTUAL_ENV
    unset MUV_ENV_NAME

    # Remove this deactivate function
    unset -f deactivate

    # If there was a previously saved deactivate, restore and call it
    if declare -f -F _muv_saved_deactivate > /dev/null; then
        eval "$(echo "function deactivate() {"; declare -f _muv_saved_deactivate | tail -n +2; echo "}")"
        unset -f _muv_saved_deactivate
        # Optionally call it: deactivate
    fi

    echo "Deactivated MUV environment (via 'deactivate' function)." >&2
}

"""

_DEACTIVATE_SCRIPT = """# Check if MUV environment is active
if [ -z "${MUV_ENV_NAME+x}" ] && [ -z "${MUV_OLD_PS1+x}" ]; then
    echo "No active MUV environment detected." >&2
    return 0
fi

if [ -n "${MUV_OLD_PS1+x}" ]; then
    export PS1="$MUV_OLD_PS1"
    unset MUV_OLD_PS1
else
    unset PS1
fi
if [ -n "${MUV_OLD_PATH+x}" ]; then
    export PATH="$MUV_OLD_PATH"
    unset MUV_OLD_PATH
fi
if [ -n "${_MUV_OLD_VIRTUAL_PYTHONHOME+x}" ] ; then
    export PYTHONHOME="$_MUV_OLD_VIRTUAL_PYTHONHOME"
    unset _MUV_OLD_VIRTUAL_PYTHONHOME
fi
unset VIRTUAL_ENV
unset MUV_ENV_NAME
if [ -n "${MUV_OLD_PS1+x}" ] && declare -f -F deactivate > /dev/null; then unset -f deactivate; fi
if declare -f -F _muv_saved_deactivate > /dev/null; then unset -f _muv_saved_deactivate; fi
: # MUV deactivation successful marker
"""


def activate_script(env_path: str | os.PathLike[str], env_name: str) -> str:
    """Return POSIX shell code that activates the environment when evaluated."""
    env_path = Path(env_path)
    bin_path = env_path / "bin"
    lines = [
        'if [ -z "$MUV_OLD_PATH" ]; then export MUV_OLD_PATH="$PATH"; fi',
        'if [ -z "$MUV_OLD_PS1" ]; then export MUV_OLD_PS1="$PS1"; fi',
        'if [ -n "${PYTHONHOME+x}" ] && [ -z "$_MUV_OLD_VIRTUAL_PYTHONHOME" ]; '
        'then export _MUV_OLD_VIRTUAL_PYTHONHOME="$PYTHONHOME"; fi',
        f'export PATH="{bin_path}:$PATH"',
        f'export VIRTUAL_ENV="{env_path}"',
        f'export MUV_ENV_NAME="{env_name}"',
        'if [ -n "${PS1+x}" ]; then PS1="(' + env_name + ') $PS1"; '
        'else PS1="(' + env_name + ') "; fi',
        'if [ -n "${PYTHONHOME+x}" ]; then unset PYTHONHOME; fi',
        _DEACTIVATE_FUNCTION,
        ": # MUV activation successful marker",
    ]
    return "\n".join(lines) + "\n"


def deactivate_script() -> str:
    """Return POSIX shell code that undoes an activation when evaluated."""
    return _DEACTIVATE_SCRIPT


def handle_activate(name: str | None = None) -> None:
    """Print the activation snippet for the active or named environment."""
    env_path, env_name = utils.get_active_or_specified_env(name)
    print(activate_script(env_path, env_name), end="")


def handle_deactivate() -> None:
    """Print the deactivation snippet."""
    print(deactivate_script(), end="")