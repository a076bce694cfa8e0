class BuildError(Exception):
    """Base error for a build step. ``returncode`` becomes the exit status."""

    def __init__(self, message: str, returncode: int = 1) -> None:
        super().__init__(message)
        self.returncode = returncode


class SettingsError(BuildError):
    pass


class CommandError(BuildError):
    def __init__(self, cmd: list[str], returncode: int) -> None:
        super().__init__(f"Command failed (exit {returncode}): {' '.join(cmd)}", returncode)
        self.cmd = cmd


class ArtifactError(BuildError):
    pass
