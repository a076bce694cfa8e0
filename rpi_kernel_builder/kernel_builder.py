#!/usr/bin/env python3
import argparse
import os
from pathlib import Path
from typing import Mapping, Optional

from rich.table import Table

from rpi_kernel_builder import artifacts, build, configure, sources
from rpi_kernel_builder.console import LOG_COLOR, console, die
from rpi_kernel_builder.errors import SettingsError
from rpi_kernel_builder.patchers import aufs_patcher
from rpi_kernel_builder.pipeline import Step, run_pipeline
from rpi_kernel_builder.settings import Settings, read_config


STEPS = [
    Step("Acquire sources", sources.acquire_sources),
    Step("Copy AUFS files", aufs_patcher.copy_aufs_files),
    Step("Apply append patches", aufs_patcher.apply_append_patches),
    Step("Apply AUFS patches", aufs_patcher.apply_aufs_patches),
    Step("Materialize kernel config", configure.materialize_config),
    Step("Compile kernel", build.compile_kernel, fatal=False),
    Step("Install modules", build.install_modules, fatal=False),
    Step("Collect artifacts", artifacts.collect_artifacts),
]


def display_intro(settings: Settings) -> None:
    console.rule("[bold green]RPi Kernel Builder Configuration Overview[/]")
    if settings.use_hardfloat:
        console.print(f"[{LOG_COLOR['info']}][!][/] Compiling with HardFP.")
    else:
        console.print(f"[{LOG_COLOR['info']}][!][/] Compiling with SoftFP.")

    for title, data in settings.report().items():
        table = Table(show_header=True, header_style="bold magenta")
        table.add_column("Option", style="cyan")
        table.add_column("Value", style="yellow")
        for k, v in data.items():
            if v in ("YES", "NO"):
                val = "[green]YES[/]" if v == "YES" else "[red]NO[/]"
            else:
                val = v
            table.add_row(k, val)
        console.print(f"[bold underline]{title}[/]")
        console.print(table)


def resolve_settings(config_path: Optional[Path], environ: Optional[Mapping[str, str]] = None) -> Settings:
    file_values = read_config(config_path) if config_path is not None else None
    return Settings.from_env(os.environ if environ is None else environ, file_values)


# =========================
# MAIN
# =========================
def main(argv: Optional[list[str]] = None, environ: Optional[Mapping[str, str]] = None) -> int:
    parser = argparse.ArgumentParser(
        prog="rpi-kernel-builder",
        description="Cross-compile a Raspberry Pi kernel with AUFS and collect firmware.",
    )
    parser.add_argument("--config", type=Path, default=None,
                        help="JSON file with option overrides (environment still wins)")
    args = parser.parse_args(argv)

    try:
        settings = resolve_settings(args.config, environ)
    except SettingsError as e:
        die(str(e), e.returncode)

    display_intro(settings)
    return run_pipeline(settings, STEPS)


if __name__ == "__main__":
    raise SystemExit(main())
