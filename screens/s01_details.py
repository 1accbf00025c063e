from __future__ import annotations
from textual.app import ComposeResult
from textual.widgets import Footer, Button, Static, Input, Label
from textual.containers import Vertical, Horizontal
from widgets.panel_header import PanelHeader
from widgets.step_indicator import StepIndicator
from screens.base import WizardScreen
from state import Step
from logger import log


class DetailsScreen(WizardScreen):
    """Step 1: Server name and description."""

    STEP = Step.DETAILS

    def compose(self) -> ComposeResult:
        draft = self.wizard.draft
        yield PanelHeader()
        yield StepIndicator(self.STEP)
        with Vertical(id="form"):
            yield Static("Step 1: Server Details", classes="title")
            yield Label("Server Name *")
            yield Input(value=draft.name, placeholder="my-awesome-server", id="inp_name")
            yield Label("Description")
            yield Input(value=draft.description, placeholder="Describe your server...",
                        id="inp_description")
            yield Static("", id="load_status")
            yield Static("", id="err_msg")
        with Horizontal(id="nav_buttons"):
            yield Button("↻ Retry", id="btn_retry", variant="warning")
            yield Button("Next →", id="btn_next", variant="primary", disabled=True)
        yield Footer()

    def on_mount(self) -> None:
        self.follow_wizard()
        self.query_one("#inp_name", Input).focus()

    def refresh_view(self) -> None:
        self._show_load_status()
        self.query_one("#btn_next", Button).disabled = not self.wizard.can_proceed(self.STEP)

    def on_input_changed(self, event: Input.Changed) -> None:
        if event.input.id == "inp_name":
            self.wizard.update_field("name", event.value)
        elif event.input.id == "inp_description":
            self.wizard.update_field("description", event.value)

    def on_input_submitted(self, event: Input.Submitted) -> None:
        self._go_next()

    def _go_next(self) -> None:
        ok, msg = self.wizard.check_step(self.STEP)
        if not ok or not self.wizard.advance():
            self._show_error(msg)
            return
        self._show_error("")
        log.info("Step 1: name=%r", self.wizard.draft.name)
        from screens.s02_resources import ResourcesScreen
        self.app.push_screen(ResourcesScreen())

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "btn_next":
            self._go_next()
        elif event.button.id == "btn_retry":
            self.wizard.retry("quota")
