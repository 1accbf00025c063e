from __future__ import annotations
from textual.app import ComposeResult
from textual.widgets import Footer, Button, Static, DataTable
from textual.containers import Vertical, Horizontal
from widgets.panel_header import PanelHeader
from widgets.step_indicator import StepIndicator
from screens.base import WizardScreen
from state import Step, Success
from wizard.controller import QuotaExhausted, ValidationBlocked
from wizard.submission import SubmissionBusy
from logger import log


class NodeScreen(WizardScreen):
    """Step 4: Pick the node (region) and deploy."""

    STEP = Step.NODE

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
            yield Static("Step 4: Node", classes="title")
            yield Static(
                "Use [bold]↑↓[/bold] to browse and [bold]Enter[/bold] to pick the node."
            )
            yield DataTable(id="node_table", cursor_type="row")
            yield Static("", id="load_status")
            yield Static("", id="err_msg")
        with Horizontal(id="nav_buttons"):
            yield Button("← Back", id="btn_back", variant="default")
            yield Button("↻ Retry", id="btn_retry", variant="warning")
            yield Button("Deploy Server", id="btn_deploy", variant="success", disabled=True)
        yield Footer()

    def on_mount(self) -> None:
        table = self.query_one("#node_table", DataTable)
        table.add_column("", key="sel", width=2)
        table.add_column("Node", key="name")
        table.add_column("ID", key="display_id")
        table.add_column("Region", key="region")
        self.follow_wizard()

    def refresh_view(self) -> None:
        nodes = self.wizard.nodes
        table = self.query_one("#node_table", DataTable)
        table.display = nodes.ready
        if self._show_load_status() and self._built_for != nodes.generation:
            self._built_for = nodes.generation
            table.clear()
            for node in nodes.value:
                table.add_row(
                    "",
                    node.name,
                    f"#{node.display_id}",
                    node.region_code or "—",
                    key=str(node.display_id),
                )
            log.info("Step 4: %d nodes listed", len(nodes.value))
        self._mark_selected(table, nodes.ready)

        pending = self.wizard.submission.pending
        deploy = self.query_one("#btn_deploy", Button)
        deploy.label = "Creating…" if pending else "Deploy Server"
        deploy.disabled = pending or not self.wizard.can_proceed(self.STEP)
        self.query_one("#btn_back", Button).disabled = pending
        if self.wizard.last_failure and not pending:
            self._show_error(self.wizard.last_failure)

    def _mark_selected(self, table: DataTable, ready: bool) -> None:
        if not ready:
            return
        selected = self.wizard.draft.node_id
        for node in self.wizard.nodes.value:
            mark = "✓" if node.display_id == selected else ""
            table.update_cell(str(node.display_id), "sel", mark)

    def on_data_table_row_selected(self, event: DataTable.RowSelected) -> None:
        display_id = int(event.row_key.value)
        if self.wizard.select_node(display_id):
            log.info("Step 4: node #%s selected", display_id)

    async def _deploy(self) -> None:
        try:
            result = await self.wizard.submit()
        except (ValidationBlocked, QuotaExhausted, SubmissionBusy) as e:
            self._show_error(str(e))
            return
        if isinstance(result, Success):
            from screens.s05_created import CreatedScreen
            self.app.push_screen(CreatedScreen(result.handle))
        else:
            self._show_error(result.reason)

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "btn_back":
            if not self.wizard.submission.pending:
                self.go_back()
        elif event.button.id == "btn_retry":
            self.wizard.retry("nodes")
        elif event.button.id == "btn_deploy":
            event.button.disabled = True
            self._show_error("")
            self.run_worker(self._deploy(), exclusive=True)

    def action_go_back(self) -> None:
        if not self.wizard.submission.pending:
            self.go_back()
