from rpi_kernel_builder.console import log_step, log_success, run
from rpi_kernel_builder.settings import Settings


def compile_kernel(settings: Settings) -> None:
    # -k: keep going past failing units
    log_step(f"Cross-compiling kernel with {settings.parallel_opt} parallel jobs")
    run(settings.make_args + ["-k", "-j", str(settings.parallel_opt)],
        cwd=settings.kern_source,
        placeholder="Building kernel image and modules...",
        placeholder_column="Compiling...")
    log_success("Kernel build completed")

def install_modules(settings: Settings) -> None:
    log_step(f"Installing kernel modules into {settings.mod_output}")
    run(settings.make_args + ["modules_install", f"INSTALL_MOD_PATH={settings.mod_output}"],
        cwd=settings.kern_source)
    log_success("Modules installed")
