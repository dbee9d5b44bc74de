# muv

Manage global Python virtual environments with `uv`.

`muv` keeps named virtual environments in one place. You can activate any of
them, add packages to it or run a command in it from any directory. Each
environment is an ordinary virtual environment made by `uv venv`. Packages are
installed and removed with `uv pip`.

`muv` needs the `uv` executable on your `PATH`. Every command runs
`uv --version` first. If that fails, `muv` prints an error and exits with
status 1.

## Installation

```sh
pip install muv
```

This installs the `muv` command.

## Shell set-up

Activation changes variables in the shell you are using, so `muv` relies on a
shell function. `muv init` writes that function for bash or zsh:

```sh
muv init
source ~/.bashrc     # or ~/.zshrc
```

`muv init` looks at `$SHELL` to pick the shell. It then does two things:

- It writes the `muv` shell function to `~/.muv-functions.sh`.
- It adds a block to `~/.bashrc` or `~/.zshrc`. The block sits between
  `# MUV INIT START` and `# MUV INIT END`. It sets `MUV_BINARY_PATH` and
  sources the functions file.

If the block is already in the file, the file is left unchanged. `muv init
--force` removes the old block and writes a new one. Any other shell is
rejected with an "Unsupported shell" error.

If you have not run `muv init`, you can evaluate the output yourself:

```sh
eval "$(muv activate myenv)"
```

Activation defines a `deactivate` function, and typing `deactivate` undoes the
activation.

## Usage

```sh
muv create myenv requests                # create an environment and install packages
muv create py310 --python 3.10 pytest    # choose the interpreter
muv list                                 # list the environments
muv activate myenv                       # activate (after `muv init`)
muv install numpy "flask>=2.0"           # install into the active environment
muv install -e myenv -r requirements.txt
muv install -e myenv -t pyproject.toml   # install [project].dependencies
muv uninstall -e myenv requests
muv freeze myenv                         # requirements-style list of packages
muv path myenv                           # where the environment lives
muv run myenv -- python script.py --arg value
muv deactivate
muv delete myenv                         # asks for confirmation; -y to skip
muv home                                 # where muv keeps its data
muv completions bash                     # also zsh, fish, powershell or elvish
```

`create` needs at least one package name.

`run` picks what to run as follows:

- `python` runs the environment's own interpreter.
- A name that exists in the environment's `bin` directory runs that program.
- Anything else is run as given.

In every case `VIRTUAL_ENV` is set to the environment.

Some commands take an optional environment name: `activate`, `install`,
`uninstall`, `freeze` and `path`. If you leave it out, they use the active
environment. They fail in these cases:

- No environment is active and you named none.
- You named a different environment from the active one.
- The active virtual environment is not one that `muv` manages.

## Where environments live

Environments are kept in `<home>/envs/<name>`. By default the home directory
is `.muv` inside your user data directory. Set the `MUV_HOME` environment
variable to use another directory. `muv home` prints the directory in use.

## Using it from Python

The commands can also be called as functions:

- `muv.commands` has `handle_create`, `handle_list`, `list_environments`,
  `handle_delete`, `handle_install`, `handle_uninstall`, `handle_freeze`,
  `handle_path`, `handle_home` and `handle_run`.
- `muv.activation` returns the shell code: `activate_script` and
  `deactivate_script`.
- `muv.shell_init.handle_init` does the shell set-up.
- `muv.utils` finds environments: `get_muv_home`, `get_envs_dir`,
  `get_env_path`, `ensure_env_exists` and `get_active_or_specified_env`.

Failures raise subclasses of `muv.errors.MuvError`.

## Limitations

- Activation and deactivation produce code for bash and zsh only.
- `muv init` supports bash and zsh only.
- Environments are expected to have the POSIX layout, with programs in `bin/`.
  Windows environments are not handled.