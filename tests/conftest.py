from dataclasses import replace
from pathlib import Path

import pytest

from rpi_kernel_builder.errors import CommandError
from rpi_kernel_builder.settings import Settings


class FakeRunner:
    """Records commands instead of running them; ``fail`` maps a command prefix to an exit code."""

    def __init__(self):
        self.calls = []
        self.fail = {}

    def __call__(self, cmd, cwd=None, placeholder=None, placeholder_column=None, stdin_path=None):
        self.calls.append((list(cmd), cwd, stdin_path))
        for prefix, code in self.fail.items():
            if tuple(cmd[:len(prefix)]) == prefix:
                raise CommandError(list(cmd), code)

    @property
    def commands(self):
        return [cmd for cmd, _, _ in self.calls]


@pytest.fixture
def runner():
    return FakeRunner()


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    base = Settings.from_env({})
    return replace(
        base,
        aufs_source=tmp_path / "data/aufs",
        kern_source=tmp_path / "data/rpi-linux",
        fw_source=tmp_path / "data/rpi-firmware",
        kern_output=tmp_path / "kern/linux",
        mod_output=tmp_path / "kern/linux/modules",
        fw_output=tmp_path / "kern/firmware",
        config_input=tmp_path / "config/rpi-config",
    )


@pytest.fixture
def trees(settings: Settings) -> Settings:
    for d in (settings.aufs_source, settings.fw_source, settings.kern_source):
        d.mkdir(parents=True, exist_ok=True)
    return settings
