from __future__ import annotations
from textual.app import ComposeResult
from textual.widgets import Footer, Button, Static, DataTable
from textual.containers import Vertical, Horizontal
from widgets.panel_header import PanelHeader
from widgets.step_indicator import StepIndicator
from screens.base import WizardScreen
from state import Step
from logger import log


class SoftwareScreen(WizardScreen):
    """Step 3: Pick the software image (egg) the server will run."""

    STEP = Step.SOFTWARE

    BINDINGS = [
        ("escape", "go_back", "Back"),
    ]

    def __init__(self) -> None:
        super().__init__()
        self._built_for = 0

    def compose(self) -> ComposeResult:
        yield PanelHeader()
        yield StepIndicator(self.STEP)
        with Vertical(id="content"):
            yield Static("Step 3: Server Software", classes="title")
            yield Static(
                "Use [bold]↑↓[/bold] to browse and [bold]Enter[/bold] to pick the software."
            )
            yield DataTable(id="image_table", cursor_type="row")
            yield Static("", id="load_status")
            yield Static("", id="err_msg")
        with Horizontal(id="nav_buttons"):
            yield Button("← Back", id="btn_back", variant="default")
            yield Button("↻ Retry", id="btn_retry", variant="warning")
            yield Button("Next →", id="btn_next", variant="primary", disabled=True)
        yield Footer()

    def on_mount(self) -> None:
        table = self.query_one("#image_table", DataTable)
        table.add_column("", key="sel", width=2)
        table.add_column("Software", key="name")
        table.add_column("Description", key="description")
        self.follow_wizard()

    def refresh_view(self) -> None:
        images = self.wizard.images
        table = self.query_one("#image_table", DataTable)
        table.display = images.ready
        if self._show_load_status() and self._built_for != images.generation:
            self._built_for = images.generation
            table.clear()
            for image in images.value:
                table.add_row(
                    "",
                    image.name,
                    (image.description or "")[:60],
                    key=str(image.display_id),
                )
            log.info("Step 3: %d software images listed", len(images.value))
            if not images.value:
                self.query_one("#load_status", Static).update(
                    "[yellow]No software is available yet.[/yellow]"
                )
        self._mark_selected(table, images.ready)
        self.query_one("#btn_next", Button).disabled = not self.wizard.can_proceed(self.STEP)

    def _mark_selected(self, table: DataTable, ready: bool) -> None:
        if not ready:
            return
        selected = self.wizard.draft.image_id
        for image in self.wizard.images.value:
            mark = "✓" if image.display_id == selected else ""
            table.update_cell(str(image.display_id), "sel", mark)

    def on_data_table_row_selected(self, event: DataTable.RowSelected) -> None:
        display_id = int(event.row_key.value)
        if self.wizard.select_image(display_id):
            log.info("Step 3: software #%s selected", display_id)
            self._show_error("")

    def _go_next(self) -> None:
        ok, msg = self.wizard.check_step(self.STEP)
        if not ok or not self.wizard.advance():
            self._show_error(msg)
            return
        from screens.s04_node import NodeScreen
        self.app.push_screen(NodeScreen())

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "btn_back":
            self.go_back()
        elif event.button.id == "btn_retry":
            self.wizard.retry("images")
        elif event.button.id == "btn_next":
            self._go_next()

    def action_go_back(self) -> None:
        self.go_back()
