import shutil
from pathlib import Path

from rich.panel import Panel

from rpi_kernel_builder.console import LOG_COLOR, console, log_step
from rpi_kernel_builder.errors import ArtifactError
from rpi_kernel_builder.settings import Settings

KERNEL_IMAGE = Path("arch/arm/boot/Image")
FIRMWARE_PATTERNS = ("*.dtb", "*.elf", "*.dat", "bootcode.bin")


def log_copy(title: str, src: Path, dst: Path) -> None:
    console.rule(f"[bold green]{title}[/]")
    console.print(f"[yellow]From →[/] {src}\n[yellow]To   →[/] {dst}", highlight=False)

def ensure_output_dirs(settings: Settings) -> None:
    for d in (settings.kern_output, settings.mod_output, settings.fw_output):
        d.mkdir(parents=True, exist_ok=True)

def copy_kernel_image(settings: Settings) -> Path:
    src = settings.kern_source / KERNEL_IMAGE
    if not src.is_file():
        raise ArtifactError(f"Kernel image not found: {src}")
    dst = settings.kern_output / "kernel.img"
    shutil.copy2(src, dst)
    log_copy("Kernel image copied", src, dst)
    return dst

def copy_firmware(settings: Settings) -> list[Path]:
    boot_dir = settings.fw_boot_dir
    copied = []
    for pattern in FIRMWARE_PATTERNS:
        matches = sorted(boot_dir.glob(pattern))
        if not matches:
            raise ArtifactError(f"No firmware matching {pattern} in {boot_dir}")
        for src in matches:
            shutil.copy2(src, settings.fw_output)
            copied.append(settings.fw_output / src.name)
    log_copy(f"Firmware copied ({len(copied)} files)", boot_dir, settings.fw_output)
    return copied

def copy_config(settings: Settings) -> Path:
    src = settings.kern_source / ".config"
    if not src.is_file():
        raise ArtifactError(f"Kernel config not found: {src}")
    dst = settings.kern_output / "rpi-config"
    shutil.copyfile(src, dst)
    log_copy("Kernel config copied", src, dst)
    return dst

def collect_artifacts(settings: Settings) -> None:
    log_step("Collecting build artifacts")
    ensure_output_dirs(settings)
    copy_kernel_image(settings)
    copy_firmware(settings)
    copy_config(settings)
    console.print(Panel(f"Artifact collection complete → {settings.kern_output.parent}",
                        style=LOG_COLOR["success"]))
