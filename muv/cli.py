"""Command-line interface for muv."""

from __future__ import annotations

import argparse
import sys
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from muv import activation, commands, shell_init, utils
from muv.errors import MuvError

VERSION = "0.1.6"
PROG = "muv"
SHELLS = ("bash", "elvish", "fish", "powershell", "zsh")

_ABOUT = "Global environment management tool using uv"
_LONG_ABOUT = (
    "muv is a command-line tool for managing global Python virtual environments "
    "using uv. It provides a simple interface for creating, activating, and managing "
    "Python environments with their own isolated packages and dependencies."
)
_HELP_FLAGS = ("-h", "--help")
_VERSION_FLAGS = ("-V", "--version")


@dataclass(frozen=True)
class _Arg:
    flags: tuple[str, ...]
    help: str
    kwargs: dict[str, Any] = field(default_factory=dict)

    @property
    def is_option(self) -> bool:
        return self.flags[0].startswith("-")

    @property
    def takes_value(self) -> bool:
        return self.is_option and self.kwargs.get("action") != "store_true"


@dataclass(frozen=True)
class _Command:
    name: str
    about: str
    long_about: str
    args: tuple[_Arg, ...] = ()

    def completion_words(self) -> list[str]:
        words: list[str] = []
        for arg in self.args:
            if arg.is_option:
                words.extend(arg.flags)
            else:
                words.extend(arg.kwargs.get("choices", ()))
        return [*words, *_HELP_FLAGS]


_ENV_NAME_ARG = _Arg(
    ("name",),
    "Environment name; the active environment is used when omitted",
    {"nargs": "?", "metavar": "ENV_NAME"},
)

_PACKAGE_ARGS = (
    _Arg(
        ("-e", "--env-name"),
        "Environment name; the active environment is used when omitted",
        {"metavar": "ENV_NAME", "dest": "env_name"},
    ),
    _Arg(
        ("packages",),
        "Packages to manage (e.g. requests, numpy, 'flask>=2.0')",
        {"nargs": "*", "metavar": "PACKAGES"},
    ),
    _Arg(
        ("-r", "--requirements"),
        "Install from requirements.txt",
        {"metavar": "REQUIREMENTS"},
    ),
    _Arg(
        ("-t", "--toml"),
        "Install from pyproject.toml",
        {"metavar": "TOML", "dest": "toml_file"},
    ),
)

_COMMANDS: tuple[_Command, ...] = (
    _Command(
        "init",
        "Initialize muv in your shell configuration",
        "Initialize muv in your shell configuration to enable environment "
        "activation and deactivation",
        (_Arg(("--force",), "Force re-initialization", {"action": "store_true"}),),
    ),
    _Command(
        "completions",
        "Generate shell completion scripts",
        "Generate shell completion scripts for bash, zsh, fish, or powershell",
        (_Arg(("shell",), "Shell type", {"choices": SHELLS}),),
    ),
    _Command(
        "create",
        "Create a new virtual environment",
        "Create a new Python virtual environment with the specified name and "
        "Python version",
        (
            _Arg(("name",), "Name of the environment to create"),
            _Arg(
                ("-p", "--python"),
                "Python version to use (e.g. 3.10, python3.11, /usr/bin/python3)",
            ),
            _Arg(("packages",), "Packages to install", {"nargs": "+", "metavar": "PACKAGES"}),
        ),
    ),
    _Command(
        "list",
        "List all available environments",
        "Display a list of all virtual environments managed by muv",
    ),
    _Command(
        "activate",
        "Activate a virtual environment",
        "Activate a virtual environment to use its Python interpreter and packages",
        (_ENV_NAME_ARG,),
    ),
    _Command(
        "deactivate",
        "Deactivate the current virtual environment",
        "Deactivate the currently active virtual environment",
    ),
    _Command(
        "delete",
        "Delete a virtual environment",
        "Permanently delete a virtual environment and all its installed packages",
        (
            _Arg(("name",), "Environment to delete"),
            _Arg(("-y", "--yes"), "Skip confirmation", {"action": "store_true"}),
        ),
    ),
    _Command(
        "install",
        "Install packages in an environment",
        "Install Python packages in the specified or active environment using uv",
        _PACKAGE_ARGS,
    ),
    _Command(
        "uninstall",
        "Uninstall packages from an environment",
        "Uninstall Python packages from the specified or active environment",
        _PACKAGE_ARGS,
    ),
    _Command(
        "freeze",
        "Output installed packages in requirements format",
        "Generate a requirements.txt-compatible list of all installed packages in "
        "the environment",
        (_ENV_NAME_ARG,),
    ),
    _Command(
        "path",
        "Print the path to an environment",
        "Display the full filesystem path to the specified environment",
        (_ENV_NAME_ARG,),
    ),
    _Command(
        "home",
        "Print the muv home directory",
        "Display the path to the muv home directory where environments are stored",
    ),
    _Command(
        "run",
        "Run a command in an environment",
        "Execute a command within the context of the specified environment",
        (
            _Arg(("env_name",), "Environment name", {"metavar": "ENV_NAME"}),
            _Arg(
                ("command_and_args",),
                "Command to run, given after '--' (e.g. -- python script.py --arg value)",
                {"nargs": "+", "metavar": "COMMAND"},
            ),
        ),
    ),
)


class _HelpFormatter(argparse.HelpFormatter):
    def add_usage(self, usage, actions, groups, prefix=None):
        super().add_usage(usage, actions, groups, "Usage: " if prefix is None else prefix)


def _add_standard_options(group: argparse._ArgumentGroup) -> None:
    group.add_argument(*_HELP_FLAGS, action="help", help="Print help")
    group.add_argument(
        *_VERSION_FLAGS,
        action="version",
        version=f"{PROG} {VERSION}",
        help="Print version",
    )


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for every muv command."""
    parser = argparse.ArgumentParser(
        prog=PROG,
        description=f"{_ABOUT}\n\n{_LONG_ABOUT}",
        add_help=False,
        formatter_class=_HelpFormatter,
    )
    subparsers = parser.add_subparsers(
        title="Commands", dest="command", required=True, metavar="COMMAND"
    )
    _add_standard_options(parser.add_argument_group("Options"))

    for spec in _COMMANDS:
        sub = subparsers.add_parser(
            spec.name,
            help=spec.about,
            description=spec.long_about,
            add_help=False,
            formatter_class=_HelpFormatter,
        )
        positionals = sub.add_argument_group("Arguments")
        options = sub.add_argument_group("Options")
        for arg in spec.args:
            target = options if arg.is_option else positionals
            target.add_argument(*arg.flags, help=arg.help, **arg.kwargs)
        _add_standard_options(options)
    return parser


def _sh_quote(text: str) -> str:
    return "'" + text.replace("'", "'\\''") + "'"


def _top_words() -> list[str]:
    return [*(spec.name for spec in _COMMANDS), *_HELP_FLAGS, *_VERSION_FLAGS]


_BASH_TEMPLATE = """_muv() {
    local cur opts
    COMPREPLY=()
    cur="${COMP_WORDS[COMP_CWORD]}"
    if [ "$COMP_CWORD" -eq 1 ]; then
        opts="@TOP@"
    else
        case "${COMP_WORDS[1]}" in
@CASES@
            *) opts="" ;;
        esac
    fi
    COMPREPLY=( $(compgen -W "$opts" -- "$cur") )
    return 0
}

complete -F _muv -o bashdefault -o default muv
"""

_ZSH_TEMPLATE = """#compdef muv

_muv() {
    local -a commands
    commands=(
@DESCRIPTIONS@
    )
    if (( CURRENT == 2 )); then
        _describe -t commands 'muv commands' commands
        compadd -- @TOPFLAGS@
        return
    fi
    case "$words[2]" in
@CASES@
        *) _files ;;
    esac
}

if [ "$funcstack[1]" = "_muv" ]; then
    _muv "$@"
else
    compdef _muv muv
fi
"""

_POWERSHELL_TEMPLATE = """Register-ArgumentCompleter -Native -CommandName 'muv' -ScriptBlock {
    param($wordToComplete, $commandAst, $cursorPosition)
    $elements = @($commandAst.CommandElements | Select-Object -Skip 1 | ForEach-Object { $_.ToString() })
    if ($elements.Count -eq 0 -or ($elements.Count -eq 1 -and $wordToComplete -ne '')) {
        $candidates = @(@TOP@)
    } else {
        $candidates = switch ($elements[0]) {
@CASES@
            default { @() }
        }
    }
    $candidates | Where-Object { $_ -like "$wordToComplete*" } | ForEach-Object {
        [System.Management.Automation.CompletionResult]::new($_, $_, 'ParameterValue', $_)
    }
}
"""

_ELVISH_TEMPLATE = """set edit:completion:arg-completer[muv] = {|@words|
    var n = (count $words)
    if (== $n 2) {
        put @TOP@
        return
    }
    var completions = [
@CASES@
    ]
    if (has-key $completions $words[1]) {
        all $completions[$words[1]]
    }
}
"""


def _bash_script() -> str:
    cases = "\n".join(
        f'            {spec.name}) opts="{" ".join(spec.completion_words())}" ;;'
        for spec in _COMMANDS
    )
    return _BASH_TEMPLATE.replace("@TOP@", " ".join(_top_words())).replace("@CASES@", cases)


def _zsh_script() -> str:
    descriptions = "\n".join(
        "        " + _sh_quote(f"{spec.name}:{spec.about.replace(':', chr(92) + ':')}")
        for spec in _COMMANDS
    )
    cases = "\n".join(
        f"        {spec.name}) compadd -- {' '.join(spec.completion_words())} ;;"
        for spec in _COMMANDS
    )
    return (
        _ZSH_TEMPLATE.replace("@DESCRIPTIONS@", descriptions)
        .replace("@TOPFLAGS@", " ".join([*_HELP_FLAGS, *_VERSION_FLAGS]))
        .replace("@CASES@", cases)
    )


def _fish_flag_parts(flags: Sequence[str]) -> str:
    parts = []
    for flag in flags:
        if flag.startswith("--"):
            parts.append(f"-l {flag[2:]}")
        else:
            parts.append(f"-s {flag[1:]}")
    return " ".join(parts)


def _fish_script() -> str:
    lines = [
        f"complete -c muv -n \"__fish_use_subcommand\" {_fish_flag_parts(_HELP_FLAGS)} -d 'Print help'",
        f"complete -c muv -n \"__fish_use_subcommand\" {_fish_flag_parts(_VERSION_FLAGS)} -d 'Print version'",
    ]
    lines.extend(
        f'complete -c muv -n "__fish_use_subcommand" -f -a "{spec.name}" -d {_sh_quote(spec.about)}'
        for spec in _COMMANDS
    )
    for spec in _COMMANDS:
        condition = f'-n "__fish_seen_subcommand_from {spec.name}"'
        for arg in spec.args:
            if arg.is_option:
                line = f"complete -c muv {condition} {_fish_flag_parts(arg.flags)} -d {_sh_quote(arg.help)}"
                if arg.takes_value:
                    line += " -r"
                lines.append(line)
            elif "choices" in arg.kwargs:
                choices = " ".join(arg.kwargs["choices"])
                lines.append(f'complete -c muv {condition} -f -a "{choices}"')
        lines.append(f"complete -c muv {condition} {_fish_flag_parts(_HELP_FLAGS)} -d 'Print help'")
    return "\n".join(lines) + "\n"


def _ps_list(words: Sequence[str]) -> str:
    return ", ".join("'" + word.replace("'", "''") + "'" for word in words)


def _powershell_script() -> str:
    cases = "\n".join(
        f"            '{spec.name}' {{ @({_ps_list(spec.completion_words())}) }}"
        for spec in _COMMANDS
    )
    return _POWERSHELL_TEMPLATE.replace("@TOP@", _ps_list(_top_words())).replace(
        "@CASES@", cases
    )


def _elvish_script() -> str:
    cases = "\n".join(
        f"        &{spec.name}= [{' '.join(spec.completion_words())}]" for spec in _COMMANDS
    )
    return _ELVISH_TEMPLATE.replace("@TOP@", " ".join(_top_words())).replace(
        "@CASES@", cases
    )


_GENERATORS = {
    "bash": _bash_script,
    "elvish": _elvish_script,
    "fish": _fish_script,
    "powershell": _powershell_script,
    "zsh": _zsh_script,
}


def generate_completion(shell: str) -> str:
    """Return a completion script for muv in the given shell."""
    try:
        generator = _GENERATORS[shell]
    except KeyError:
        raise ValueError(
            f"Unsupported shell: {shell}. Choose one of: {', '.join(SHELLS)}"
        ) from None
    return generator()


def _dispatch(args: argparse.Namespace) -> None:
    match args.command:
        case "init":
            shell_init.handle_init(args.force)
        case "completions":
            sys.stdout.write(generate_completion(args.shell))
        case "create":
            commands.handle_create(args.name, args.python, args.packages)
        case "list":
            commands.handle_list()
        case "activate":
            activation.handle_activate(args.name)
        case "deactivate":
            activation.handle_deactivate()
        case "delete":
            commands.handle_delete(args.name, args.yes)
        case "install":
            commands.handle_install(
                args.env_name, args.packages, args.requirements, args.toml_file
            )
        case "uninstall":
            commands.handle_uninstall(args.env_name, args.packages)
        case "freeze":
            commands.handle_freeze(args.name)
        case "path":
            commands.handle_path(args.name)
        case "home":
            commands.handle_home()
        case "run":
            commands.handle_run(args.env_name, args.command_and_args)
        case other:
            raise MuvError(f"Unknown command: {other}")


def main(argv: Sequence[str] | None = None) -> int:
    """Run muv with the given arguments and return the exit status."""
    try:
        utils.check_uv_exists()
    except MuvError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        print("Please ensure 'uv' is installed and in your PATH.", file=sys.stderr)
        return 1

    args = build_parser().parse_args(argv)
    try:
        _dispatch(args)
    except (MuvError, OSError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())