import json

import pytest

from rpi_kernel_builder.errors import SettingsError
from rpi_kernel_builder.settings import ARMHF_CC_PFX, ARMSF_CC_PFX, Settings, read_config


def test_defaults():
    s = Settings.from_env({})
    assert s.aufs_enable is True
    assert s.parallel_opt == 3
    assert s.platform == "bcmrpi"
    assert s.update_existing is False
    assert s.use_existing_src is False
    assert s.use_hardfloat is True
    assert s.clone_depth == 0
    assert s.kern_repo.branch == "rpi-3.18.y"
    assert str(s.kern_output) == "/kern/linux"


@pytest.mark.parametrize("value, prefix", [
    ("YES", ARMHF_CC_PFX),
    ("NO", ARMSF_CC_PFX),
    ("yes", ARMSF_CC_PFX),
    ("", ARMSF_CC_PFX),
])
def test_cross_compile_prefix_follows_hardfloat(value, prefix):
    s = Settings.from_env({"USE_HARDFLOAT": value})
    assert s.cross_compile == prefix


def test_cross_compile_prefix_constants():
    assert ARMHF_CC_PFX == "/usr/bin/arm-linux-gnueabihf-"
    assert ARMSF_CC_PFX == "/usr/bin/arm-linux-gnueabi-"


@pytest.mark.parametrize("platform", ["bcm2708", "", "BCMRPI", "x86"])
def test_invalid_platform_rejected(platform):
    with pytest.raises(SettingsError) as exc:
        Settings.from_env({"PLATFORM": platform})
    assert exc.value.returncode == 1


def test_bcm2709_accepted():
    assert Settings.from_env({"PLATFORM": "bcm2709"}).platform == "bcm2709"


def test_flags_require_exact_yes():
    s = Settings.from_env({"AUFS_ENABLE": "no", "USE_EXISTING_SRC": "YES", "UPDATE_EXISTING": "true"})
    assert s.aufs_enable is False
    assert s.use_existing_src is True
    assert s.update_existing is False


def test_invalid_parallel_opt_falls_back(capsys):
    s = Settings.from_env({"PARALLEL_OPT": "many"})
    assert s.parallel_opt == 3
    assert "PARALLEL_OPT" in capsys.readouterr().out


def test_make_args():
    s = Settings.from_env({"PLATFORM": "bcm2709", "USE_HARDFLOAT": "NO"})
    assert s.make_args == ["make", "ARCH=arm", "PLATFORM=bcm2709", f"CROSS_COMPILE={ARMSF_CC_PFX}"]


def test_file_values_layer_under_environment():
    s = Settings.from_env(
        {"PARALLEL_OPT": "8"},
        {"PARALLEL_OPT": 2, "AUFS_ENABLE": False, "RPI_KERN_BRANCH": "rpi-4.1.y"},
    )
    assert s.parallel_opt == 8
    assert s.aufs_enable is False
    assert s.kern_repo.branch == "rpi-4.1.y"


def test_fw_boot_dir_strips_slashes():
    s = Settings.from_env({"FW_SOURCE": "/src/fw", "RPI_FW_SUBDIR": "/boot"})
    assert str(s.fw_boot_dir) == "/src/fw/boot"


def test_report_sections():
    report = Settings.from_env({}).report()
    assert list(report) == [
        "Repository Settings",
        "Source Directories",
        "Build / Install Variables",
        "Environment Variables",
    ]
    assert report["Environment Variables"]["USE_HARDFLOAT"] == "YES"
    assert report["Build / Install Variables"]["CROSS_COMPILE"] == ARMHF_CC_PFX


def test_read_config(tmp_path):
    path = tmp_path / "build.json"
    path.write_text(json.dumps({"PLATFORM": "bcm2709", "USE_HARDFLOAT": False}), encoding="utf-8")
    assert read_config(path) == {"PLATFORM": "bcm2709", "USE_HARDFLOAT": False}


@pytest.mark.parametrize("cfg", [
    {"NOT_AN_OPTION": "x"},
    {"PLATFORM": 3},
    {"AUFS_ENABLE": 1},
    {"PARALLEL_OPT": [4]},
])
def test_read_config_rejects_bad_values(tmp_path, cfg):
    path = tmp_path / "build.json"
    path.write_text(json.dumps(cfg), encoding="utf-8")
    with pytest.raises(SettingsError):
        read_config(path)


def test_read_config_rejects_malformed_json(tmp_path):
    path = tmp_path / "build.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(SettingsError):
        read_config(path)
