import shutil
from pathlib import Path

from rpi_kernel_builder.console import log_info, log_step, log_success, log_warn, run
from rpi_kernel_builder.patchers.kconfig import KernelConfig
from rpi_kernel_builder.settings import Settings


def kernel_config_path(settings: Settings) -> Path:
    return settings.kern_source / ".config"

def load_supplied_config(settings: Settings) -> bool:
    if not settings.config_input.is_file():
        log_warn(f"No config volume or no {settings.config_input.name} in {settings.config_input.parent}")
        return False
    shutil.copy2(settings.config_input, kernel_config_path(settings))
    log_info(f"Loaded kernel config from {settings.config_input}")
    return True

def generate_config(settings: Settings) -> str:
    """Run defconfig when no config exists yet, olddefconfig otherwise. Returns the target."""
    if kernel_config_path(settings).exists():
        log_step(f"Building config with NEW symbol defaults from PLATFORM={settings.platform}.")
        target = "olddefconfig"
    else:
        log_step(f"Building kernel config with defaults from PLATFORM={settings.platform}.")
        target = f"{settings.platform}_defconfig"
    run(settings.make_args + [target], cwd=settings.kern_source)
    return target

def force_symbols(settings: Settings) -> None:
    path = kernel_config_path(settings)
    config = KernelConfig.load(path)
    wanted = [("CONFIG_MODULES", "y")]
    if settings.aufs_enable:
        wanted.append(("CONFIG_AUFS_FS", "m"))
    changed = False
    for symbol, value in wanted:
        if config.ensure(symbol, value):
            log_info(f"Set {symbol}={value}")
            changed = True
        else:
            log_info(f"{symbol} already set to {config.get(symbol)}")
    if changed:
        config.save(path)

def materialize_config(settings: Settings) -> None:
    load_supplied_config(settings)
    generate_config(settings)
    force_symbols(settings)
    log_success(f"Kernel config ready at {kernel_config_path(settings)}")
