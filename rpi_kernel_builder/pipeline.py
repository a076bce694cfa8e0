from dataclasses import dataclass
from typing import Callable, Optional

from rich.markup import escape
from rich.table import Table

from rpi_kernel_builder.console import console, log_step, log_warn
from rpi_kernel_builder.errors import BuildError
from rpi_kernel_builder.settings import Settings


@dataclass(frozen=True)
class Step:
    """
    One stage of the build.

    A failing ``fatal`` step stops the run; any other failing step is
    reported and the run carries on.
    """
    name: str
    action: Callable[[Settings], None]
    fatal: bool = True


@dataclass
class StepResult:
    step: Step
    error: Optional[BuildError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def run_pipeline(settings: Settings, steps: list[Step]) -> int:
    """Run ``steps`` in order and return the process exit status."""
    results: list[StepResult] = []
    status = 0
    for step in steps:
        log_step(step.name)
        try:
            step.action(settings)
        except (BuildError, OSError, UnicodeError) as exc:
            e = exc if isinstance(exc, BuildError) else BuildError(f"{type(exc).__name__}: {exc}")
            results.append(StepResult(step, e))
            if step.fatal:
                console.print(f"[red][FAILED][/]: {escape(step.name)}: {escape(str(e))}", highlight=False)
                status = e.returncode or 1
                break
            log_warn(f"{step.name} failed, continuing: {e}")
            continue
        results.append(StepResult(step))
    print_summary(results, steps)
    return status

def print_summary(results: list[StepResult], steps: list[Step]) -> None:
    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Step", style="cyan")
    table.add_column("Result")
    for result in results:
        if result.ok:
            val = "[green]ok[/]"
        elif result.step.fatal:
            val = "[red]failed[/]"
        else:
            val = "[yellow]failed (continued)[/]"
        table.add_row(result.step.name, val)
    for step in steps[len(results):]:
        table.add_row(step.name, "[dim]skipped[/]")
    console.print(table)
