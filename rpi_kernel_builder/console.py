import subprocess
import sys
from pathlib import Path
from typing import NoReturn, Optional

from rich.console import Console
from rich.markup import escape
from rich.progress import Progress, SpinnerColumn, TextColumn, TimeElapsedColumn

from rpi_kernel_builder.errors import CommandError


# =========================
# GLOBALS
# =========================
console = Console()
LOG_COLOR = {
    "info": "cyan",
    "warning": "yellow",
    "error": "red",
    "success": "green",
    "step": "magenta",
    "run": "blue",
}


# =========================
# UTILITIES
# =========================
def die(msg: str, code: int = 1) -> NoReturn:
    console.print(f"[{LOG_COLOR['error']}][FATAL][/]: {escape(msg)}")
    sys.exit(code)

def log_step(msg: str) -> None:
    console.print(f"[{LOG_COLOR['step']}][STEP][/]: {escape(msg)}")

def log_info(msg: str) -> None:
    console.print(f"[{LOG_COLOR['info']}][INFO][/]: {escape(msg)}")

def log_warn(msg: str) -> None:
    console.print(f"[{LOG_COLOR['warning']}][WARNING][/]: {escape(msg)}")

def log_success(msg: str) -> None:
    console.print(f"[{LOG_COLOR['success']}][DONE][/]: {escape(msg)}")

def run(cmd: list[str],
        cwd: Optional[Path] = None,
        placeholder: Optional[str] = None,
        placeholder_column: Optional[str] = "Executing...",
        stdin_path: Optional[Path] = None) -> None:
    """
    Run an external command, echoing it first.

    With ``placeholder`` set, a spinner with elapsed time is shown while the
    command runs. ``stdin_path`` is fed to the command's standard input.
    Raises CommandError when the command exits non-zero or cannot be found.
    """
    console.print(f"[{LOG_COLOR['run']}][RUN][/]: {escape(' '.join(cmd))}")
    stdin = open(stdin_path, "rb") if stdin_path is not None else None
    try:
        if placeholder is not None:
            console.print(f"[dim]{escape(placeholder)}[/dim]")
            console.print()  # blank line before spinner

            with Progress(
                SpinnerColumn(style="cyan"),
                TextColumn(placeholder_column),
                TimeElapsedColumn(),
                console=console,
                transient=True,
            ) as progress:
                progress.add_task("", start=True)
                subprocess.run(cmd, cwd=cwd, stdin=stdin, check=True)
        else:
            subprocess.run(cmd, cwd=cwd, stdin=stdin, check=True)
    except subprocess.CalledProcessError as e:
        raise CommandError(cmd, e.returncode) from e
    except FileNotFoundError as e:
        raise CommandError(cmd, 127) from e
    finally:
        if stdin is not None:
            stdin.close()
