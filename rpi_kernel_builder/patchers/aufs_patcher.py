import shutil
from dataclasses import dataclass
from pathlib import Path

from rpi_kernel_builder.console import console, log_info, log_step, run
from rpi_kernel_builder.errors import BuildError
from rpi_kernel_builder.settings import Settings


@dataclass(frozen=True)
class CopySpec:
    """A path in the AUFS tree copied into a directory of the kernel tree."""
    source: str
    dest: str


@dataclass(frozen=True)
class AppendPatch:
    """A line appended to a kernel file unless the file already contains it."""
    text: str
    target: str


AUFS_KERN_CPY = (
    CopySpec("fs", "."),
    CopySpec("Documentation", "."),
    CopySpec("include/uapi/linux/aufs_type.h", "include/uapi/linux"),
)

FILE_APPEND_PATCH = (
    AppendPatch("header-y += aufs_type.h", "include/uapi/linux/Kbuild"),
)

# Applied in this order; later patches touch files changed by earlier ones.
AUFS_PATCHES = (
    "aufs3-base.patch",
    "aufs3-kbuild.patch",
    "aufs3-loopback.patch",
    "aufs3-mmap.patch",
    "aufs3-standalone.patch",
    "tmpfs-idr.patch",
    "vfs-ino.patch",
)


def copy_into(src: Path, dest_dir: Path) -> Path:
    """Equivalent of ``cp -rp src dest_dir/``: directories merge into an existing one."""
    if not src.exists():
        raise BuildError(f"Copy source not found: {src}")
    dest_dir.mkdir(parents=True, exist_ok=True)
    target = dest_dir / src.name
    if src.is_dir():
        shutil.copytree(src, target, symlinks=True, dirs_exist_ok=True)
    else:
        shutil.copy2(src, target)
    return target

def append_line(text: str, target: Path) -> bool:
    """Append ``text`` as a line of ``target`` if absent. Returns True when appended."""
    content = target.read_text(encoding="utf-8") if target.exists() else ""
    if text in content:
        console.print(f"[=] {target} already contains '{text}', not appending.", style="cyan", markup=False)
        return False
    with open(target, "a", encoding="utf-8") as f:
        if content and not content.endswith("\n"):
            f.write("\n")
        f.write(text + "\n")
    console.print(f"[+] Appended '{text}' to {target}", style="green", markup=False)
    return True

def apply_patch(patch: Path, kernel_dir: Path) -> None:
    if not patch.is_file():
        raise BuildError(f"Patch not found: {patch}")
    log_info(f"Applying patch '{patch}' to kernel source tree.")
    run(["patch", "-p1"], cwd=kernel_dir, stdin_path=patch)


# =========================
# STAGES
# =========================
def copy_aufs_files(settings: Settings) -> None:
    log_step("Copying AUFS files into the kernel tree")
    for spec in AUFS_KERN_CPY:
        src = settings.aufs_source / spec.source
        dest = settings.kern_source / spec.dest
        log_info(f"Copying {src} to {dest}..")
        copy_into(src, dest)

def apply_append_patches(settings: Settings) -> None:
    log_step("Applying append patches")
    for spec in FILE_APPEND_PATCH:
        append_line(spec.text, settings.kern_source / spec.target)

def apply_aufs_patches(settings: Settings) -> None:
    log_step("Applying AUFS patches")
    for name in AUFS_PATCHES:
        apply_patch(settings.aufs_source / name, settings.kern_source)
