import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from rpi_kernel_builder.console import log_warn
from rpi_kernel_builder.errors import SettingsError


PLATFORMS = ("bcmrpi", "bcm2709")

# Cross-compiler prefixes
ARMHF_CC_PFX = "/usr/bin/arm-linux-gnueabihf-"
ARMSF_CC_PFX = "/usr/bin/arm-linux-gnueabi-"

# option name -> (type, default)
OPTION_KEYS = {
    "AUFS_ENABLE": (bool, "YES"),
    "PARALLEL_OPT": (int, "3"),
    "PLATFORM": (str, "bcmrpi"),
    "UPDATE_EXISTING": (bool, "NO"),
    "USE_EXISTING_SRC": (bool, "NO"),
    "USE_HARDFLOAT": (bool, "YES"),
    "CLONE_DEPTH": (int, "0"),
}

REPOSITORY_KEYS = {
    "AUFS_GIT": (str, "git://aufs.git.sourceforge.net/gitroot/aufs/aufs3-standalone.git"),
    "AUFS_BRANCH": (str, "aufs3.18.1+"),
    "RPI_FW_GIT": (str, "https://github.com/raspberrypi/firmware.git"),
    "RPI_FW_BRANCH": (str, "master"),
    "RPI_FW_SUBDIR": (str, "/boot"),
    "RPI_KERN_GIT": (str, "https://github.com/raspberrypi/linux.git"),
    "RPI_KERN_BRANCH": (str, "rpi-3.18.y"),
}

DIRECTORY_KEYS = {
    "AUFS_SOURCE": (str, "/data/aufs"),
    "KERN_SOURCE": (str, "/data/rpi-linux"),
    "FW_SOURCE": (str, "/data/rpi-firmware"),
    "KERN_OUTPUT": (str, "/kern/linux"),
    "MOD_OUTPUT": (str, "/kern/linux/modules"),
    "FW_OUTPUT": (str, "/kern/firmware"),
    "CONFIG_INPUT": (str, "/config/rpi-config"),
}

ALL_KEYS = {**OPTION_KEYS, **REPOSITORY_KEYS, **DIRECTORY_KEYS}


@dataclass(frozen=True)
class Repository:
    url: str
    branch: str


@dataclass(frozen=True)
class Settings:
    """Resolved build settings, constructed once and passed to every step."""

    aufs_enable: bool
    parallel_opt: int
    platform: str
    update_existing: bool
    use_existing_src: bool
    use_hardfloat: bool
    clone_depth: int

    aufs_repo: Repository
    fw_repo: Repository
    fw_subdir: str
    kern_repo: Repository

    aufs_source: Path
    kern_source: Path
    fw_source: Path
    kern_output: Path
    mod_output: Path
    fw_output: Path
    config_input: Path

    @property
    def cross_compile(self) -> str:
        return ARMHF_CC_PFX if self.use_hardfloat else ARMSF_CC_PFX

    @property
    def fw_boot_dir(self) -> Path:
        return self.fw_source / self.fw_subdir.strip("/")

    @property
    def make_args(self) -> list[str]:
        return ["make", "ARCH=arm", f"PLATFORM={self.platform}", f"CROSS_COMPILE={self.cross_compile}"]

    @classmethod
    def from_env(cls,
                 environ: Optional[Mapping[str, str]] = None,
                 file_values: Optional[Mapping[str, Any]] = None) -> "Settings":
        environ = os.environ if environ is None else environ
        raw = {key: default for key, (_, default) in ALL_KEYS.items()}
        for key, value in (file_values or {}).items():
            raw[key] = _from_json(value)
        for key in ALL_KEYS:
            if key in environ:
                raw[key] = environ[key]

        platform = raw["PLATFORM"]
        if platform not in PLATFORMS:
            raise SettingsError(f"Invalid platform '{platform}'")

        return cls(
            aufs_enable=_flag(raw["AUFS_ENABLE"]),
            parallel_opt=_positive_int("PARALLEL_OPT", raw["PARALLEL_OPT"], 3),
            platform=platform,
            update_existing=_flag(raw["UPDATE_EXISTING"]),
            use_existing_src=_flag(raw["USE_EXISTING_SRC"]),
            use_hardfloat=_flag(raw["USE_HARDFLOAT"]),
            clone_depth=_positive_int("CLONE_DEPTH", raw["CLONE_DEPTH"], 0, allow_zero=True),
            aufs_repo=Repository(raw["AUFS_GIT"], raw["AUFS_BRANCH"]),
            fw_repo=Repository(raw["RPI_FW_GIT"], raw["RPI_FW_BRANCH"]),
            fw_subdir=raw["RPI_FW_SUBDIR"],
            kern_repo=Repository(raw["RPI_KERN_GIT"], raw["RPI_KERN_BRANCH"]),
            aufs_source=Path(raw["AUFS_SOURCE"]),
            kern_source=Path(raw["KERN_SOURCE"]),
            fw_source=Path(raw["FW_SOURCE"]),
            kern_output=Path(raw["KERN_OUTPUT"]),
            mod_output=Path(raw["MOD_OUTPUT"]),
            fw_output=Path(raw["FW_OUTPUT"]),
            config_input=Path(raw["CONFIG_INPUT"]),
        )

    def report(self) -> Dict[str, Dict[str, str]]:
        """Sections of the settings report, in display order."""
        return {
            "Repository Settings": {
                "AUFS_GIT": self.aufs_repo.url,
                "AUFS_BRANCH": self.aufs_repo.branch,
                "RPI_FW_GIT": self.fw_repo.url,
                "RPI_FW_BRANCH": self.fw_repo.branch,
                "RPI_FW_SUBDIR": self.fw_subdir,
                "RPI_KERN_GIT": self.kern_repo.url,
                "RPI_KERN_BRANCH": self.kern_repo.branch,
            },
            "Source Directories": {
                "AUFS_SOURCE": str(self.aufs_source),
                "FW_SOURCE": str(self.fw_source),
                "KERN_SOURCE": str(self.kern_source),
            },
            "Build / Install Variables": {
                "KERN_OUTPUT": str(self.kern_output),
                "MOD_OUTPUT": str(self.mod_output),
                "FW_OUTPUT": str(self.fw_output),
                "CONFIG_INPUT": str(self.config_input),
                "CROSS_COMPILE": self.cross_compile,
            },
            "Environment Variables": {
                "AUFS_ENABLE": _yes_no(self.aufs_enable),
                "PARALLEL_OPT": str(self.parallel_opt),
                "PLATFORM": self.platform,
                "UPDATE_EXISTING": _yes_no(self.update_existing),
                "USE_EXISTING_SRC": _yes_no(self.use_existing_src),
                "USE_HARDFLOAT": _yes_no(self.use_hardfloat),
                "CLONE_DEPTH": str(self.clone_depth),
            },
        }


def _flag(value: str) -> bool:
    return value == "YES"

def _yes_no(value: bool) -> str:
    return "YES" if value else "NO"

def _from_json(value: Any) -> str:
    # JSON booleans map onto the YES/NO convention of the environment
    if isinstance(value, bool):
        return _yes_no(value)
    return str(value)

def _positive_int(name: str, value: str, default: int, allow_zero: bool = False) -> int:
    try:
        number = int(value)
    except ValueError:
        number = -1
    if number > 0 or (allow_zero and number == 0):
        return number
    log_warn(f"Ignoring invalid {name}={value!r}, using {default}")
    return default


# =========================
# CONFIG FILE
# =========================
def validate_config(cfg: Dict[str, Any]) -> None:
    if not isinstance(cfg, dict):
        raise SettingsError("Config file must contain a JSON object")
    for k, v in cfg.items():
        if k not in ALL_KEYS:
            raise SettingsError(f"Unknown config key: {k}")
        expected, _ = ALL_KEYS[k]
        # bool is a subclass of int, so check it first
        if isinstance(v, bool):
            ok = expected is bool
        elif expected is bool:
            ok = isinstance(v, str)
        else:
            ok = isinstance(v, (expected, str))
        if not ok:
            raise SettingsError(f"Missing or invalid config key: {k}")

def read_config(path: Path) -> Dict[str, Any]:
    try:
        with open(path, "r") as f:
            cfg = json.load(f)
    except (OSError, ValueError) as e:
        raise SettingsError(f"Failed to read JSON config {path}: {e}") from e
    validate_config(cfg)
    return cfg
