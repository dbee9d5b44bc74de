"""Exceptions raised by muv."""


class MuvError(Exception):
    """Base class for every error muv reports."""


class EnvironmentAlreadyExistsError(MuvError):
    """An environment with the requested name is already present."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Environment '{name}' already exists.")


class EnvironmentNotFoundError(MuvError):
    """No usable environment with the requested name exists."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Environment '{name}' not found.")


class UvCommandFailedError(MuvError):
    """An external command could not be started or exited unsuccessfully."""

    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__(f"UV command failed: {detail}")


class HomeDirError(MuvError):
    """The muv home directory could not be determined."""

    def __init__(self) -> None:
        super().__init__("Failed to determine MUV home directory.")


class DeletionNotConfirmedError(MuvError):
    """The user declined to confirm a deletion."""

    def __init__(self) -> None:
        super().__init__("User did not confirm deletion.")


class TomlParseError(MuvError):
    """A pyproject.toml file could not be parsed."""

    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__(f"Failed to parse pyproject.toml: {detail}")


class UvNotInstalledError(MuvError):
    """A required program is missing or not working."""

    def __init__(self, program: str) -> None:
        self.program = program
        super().__init__(f"'{program}' is not installed or not in PATH.")