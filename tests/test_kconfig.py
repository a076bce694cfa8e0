from rpi_kernel_builder.patchers.kconfig import KernelConfig

SAMPLE = """\
#
# Automatically generated file; DO NOT EDIT.
#
CONFIG_ARM=y
# CONFIG_MODULES is not set
CONFIG_LOCALVERSION="-v7"
# CONFIG_AUFS_FS_EXTRA is not set
"""


def test_get_values(tmp_path):
    path = tmp_path / ".config"
    path.write_text(SAMPLE)
    cfg = KernelConfig.load(path)
    assert cfg.get("CONFIG_ARM") == "y"
    assert cfg.get("CONFIG_LOCALVERSION") == '"-v7"'
    assert cfg.get("CONFIG_MODULES") is None
    assert cfg.get("CONFIG_MISSING") is None


def test_ensure_rewrites_disabled_marker_in_place(tmp_path):
    path = tmp_path / ".config"
    path.write_text(SAMPLE)
    cfg = KernelConfig.load(path)

    assert cfg.ensure("CONFIG_MODULES", "y") is True
    cfg.save(path)

    lines = path.read_text().splitlines()
    assert lines[4] == "CONFIG_MODULES=y"
    assert "# CONFIG_MODULES is not set" not in lines
    assert len(lines) == len(SAMPLE.splitlines())


def test_ensure_keeps_existing_assignment():
    cfg = KernelConfig(["CONFIG_AUFS_FS=y"])
    assert cfg.ensure("CONFIG_AUFS_FS", "m") is False
    assert cfg.lines == ["CONFIG_AUFS_FS=y"]


def test_ensure_appends_absent_symbol():
    cfg = KernelConfig(["CONFIG_ARM=y"])
    assert cfg.ensure("CONFIG_AUFS_FS", "m") is True
    assert cfg.lines == ["CONFIG_ARM=y", "CONFIG_AUFS_FS=m"]


def test_prefix_symbol_does_not_count_as_set():
    cfg = KernelConfig(["CONFIG_AUFS_FS_EXTRA=y", "# CONFIG_AUFS_FS is commented"])
    assert cfg.ensure("CONFIG_AUFS_FS", "m") is True
    assert cfg.lines[-1] == "CONFIG_AUFS_FS=m"


def test_ensure_twice_never_duplicates():
    cfg = KernelConfig([])
    cfg.ensure("CONFIG_MODULES", "y")
    cfg.ensure("CONFIG_MODULES", "y")
    assert cfg.lines == ["CONFIG_MODULES=y"]


def test_edit_keeps_unrelated_lines_byte_for_byte(tmp_path):
    path = tmp_path / ".config"
    path.write_bytes(b'CONFIG_A=y\r\n# CONFIG_MODULES is not set\r\nCONFIG_S="a\x0cb\x1cc"\r\n')

    cfg = KernelConfig.load(path)
    assert cfg.ensure("CONFIG_MODULES", "y") is True
    cfg.save(path)

    assert path.read_bytes() == b'CONFIG_A=y\r\nCONFIG_MODULES=y\r\nCONFIG_S="a\x0cb\x1cc"\r\n'


def test_non_utf8_bytes_survive_edit(tmp_path):
    path = tmp_path / ".config"
    path.write_bytes(b'CONFIG_CMDLINE="console=tty1 caf\xe9"\n')

    cfg = KernelConfig.load(path)
    cfg.ensure("CONFIG_MODULES", "y")
    cfg.save(path)

    assert path.read_bytes() == b'CONFIG_CMDLINE="console=tty1 caf\xe9"\nCONFIG_MODULES=y\n'


def test_missing_trailing_newline_is_terminated_on_append(tmp_path):
    path = tmp_path / ".config"
    path.write_bytes(b"CONFIG_ARM=y")

    cfg = KernelConfig.load(path)
    cfg.ensure("CONFIG_MODULES", "y")
    cfg.save(path)

    assert path.read_bytes() == b"CONFIG_ARM=y\nCONFIG_MODULES=y\n"


def test_get_strips_carriage_return():
    cfg = KernelConfig(["CONFIG_AUFS_FS=m\r"])
    assert cfg.get("CONFIG_AUFS_FS") == "m"
