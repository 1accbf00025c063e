from __future__ import annotations
from typing import Callable, Optional
from textual.screen import Screen
from textual.widgets import Static
from state import Step
from wizard.controller import WizardController, WizardSnapshot


class WizardScreen(Screen):
    """A wizard step screen that redraws itself from controller snapshots."""

    STEP: Step = Step.DETAILS

    def __init__(self) -> None:
        super().__init__()
        self._unsubscribe: Optional[Callable[[], None]] = None

    @property
    def wizard(self) -> WizardController:
        return self.app.wizard

    def follow_wizard(self) -> None:
        """Call from on_mount once the widgets exist."""
        self._unsubscribe = self.wizard.subscribe(self._on_snapshot)
        self.refresh_view()

    def on_unmount(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def on_screen_resume(self) -> None:
        self.refresh_view()

    def _on_snapshot(self, snapshot: WizardSnapshot) -> None:
        self.refresh_view()

    def refresh_view(self) -> None:
        raise NotImplementedError

    def _show_error(self, msg: str) -> None:
        text = f"[red]Error: {msg}[/red]" if msg else ""
        self.query_one("#err_msg", Static).update(text)

    def _show_load_status(self) -> bool:
        """Render loading/failed state of this step's dataset. True when ready."""
        load = self.wizard.load_for(self.STEP)
        status = self.query_one("#load_status", Static)
        retry = self.query_one("#btn_retry")
        retry.display = load.failed
        if load.pending:
            status.update(f"[dim]Loading {load.name}…[/dim]")
        elif load.failed:
            status.update(f"[red]{self.wizard.step_error(self.STEP)}[/red]")
        else:
            status.update("")
        return load.ready

    def go_back(self) -> None:
        self.wizard.retreat()
        self.app.pop_screen()
