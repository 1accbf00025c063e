from __future__ import annotations
from textual.widgets import Static
from state import Step


def render_steps(current: Step) -> str:
    parts = []
    for step in Step:
        if step < current:
            parts.append(f"[green]✓ {step.title}[/green]")
        elif step == current:
            parts.append(f"[bold cyan]● {step.title}[/bold cyan]")
        else:
            parts.append(f"[dim]{int(step)} {step.title}[/dim]")
    return "  ─  ".join(parts)


class StepIndicator(Static):
    """Details ─ Resources ─ Software ─ Node, with done steps ticked."""

    DEFAULT_CSS = """
    StepIndicator {
        width: 100%;
        content-align: center middle;
        margin: 0 2 1 2;
    }
    """

    def __init__(self, current: Step) -> None:
        super().__init__(render_steps(current), id="step_indicator")
