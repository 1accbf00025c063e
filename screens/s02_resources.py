from __future__ import annotations
from textual.app import ComposeResult
from textual.widgets import Footer, Button, Static, Select, Label
from textual.containers import Vertical, Horizontal, VerticalScroll
from widgets.panel_header import PanelHeader
from widgets.step_indicator import StepIndicator
from screens.base import WizardScreen
from state import Dimension, Step
from validators import UNITS, choices
from logger import log

LABELS = {
    Dimension.RAM: "Memory",
    Dimension.DISK: "Storage",
    Dimension.CPU: "CPU Limit",
    Dimension.DATABASES: "Databases",
    Dimension.ALLOCATIONS: "Allocations",
}


def format_value(dimension: Dimension, value: int) -> str:
    if dimension is Dimension.DISK:
        return f"{value / 1024:.1f}GB"
    return f"{value}{UNITS[dimension]}"


class ResourcesScreen(WizardScreen):
    """Step 2: RAM / disk / CPU / databases / allocations within the account quota."""

    STEP = Step.RESOURCES

    BINDINGS = [
        ("escape", "go_back", "Back"),
    ]

    def __init__(self) -> None:
        super().__init__()
        self._built_for = 0   # quota generation the pickers were built from

    def compose(self) -> ComposeResult:
        yield PanelHeader()
        yield StepIndicator(self.STEP)
        with VerticalScroll(id="form"):
            yield Static("Step 2: Server Resources", classes="title")
            yield Static("", id="quota_summary")
            yield Vertical(id="resource_fields")
            yield Static("", id="load_status")
            yield Static("", id="err_msg")
        with Horizontal(id="nav_buttons"):
            yield Button("← Back", id="btn_back", variant="default")
            yield Button("↻ Retry", id="btn_retry", variant="warning")
            yield Button("Next →", id="btn_next", variant="primary", disabled=True)
        yield Footer()

    def on_mount(self) -> None:
        self.follow_wizard()

    def refresh_view(self) -> None:
        quota = self.wizard.quota
        if self._show_load_status() and self._built_for != quota.generation:
            self._built_for = quota.generation
            self.run_worker(self._build_fields(), exclusive=True)
        elif not quota.ready and self._built_for:
            self._built_for = 0
            self.run_worker(self.query_one("#resource_fields").remove_children(), exclusive=True)
        self.query_one("#btn_next", Button).disabled = not self.wizard.can_proceed(self.STEP)

    async def _build_fields(self) -> None:
        quota = self.wizard.quota.value
        draft = self.wizard.draft
        container = self.query_one("#resource_fields", Vertical)
        await container.remove_children()

        self.query_one("#quota_summary", Static).update(
            f"[dim]Available: {quota.ram}MB RAM, {quota.disk}MB disk, {quota.cpu}% CPU, "
            f"{quota.databases} databases, {quota.allocations} allocations, "
            f"{quota.slots} server slots[/dim]"
        )

        widgets = []
        for dim in Dimension:
            values = choices(self.wizard.bounds(dim))
            widgets.append(Label(f"{LABELS[dim]}:"))
            if not values:
                widgets.append(Static(
                    f"[red]Not enough {LABELS[dim].lower()} quota for a server.[/red]",
                    id=f"no_{dim.value}",
                ))
                continue
            widgets.append(Select(
                [(format_value(dim, v), v) for v in values],
                value=getattr(draft, dim.value),
                allow_blank=False,
                id=f"sel_{dim.value}",
            ))
        await container.mount(*widgets)
        log.info("Step 2: resource pickers built for quota %s", quota)

    def on_select_changed(self, event: Select.Changed) -> None:
        select_id = event.select.id or ""
        if not select_id.startswith("sel_") or event.value is Select.BLANK:
            return
        field_name = select_id[len("sel_"):]
        if getattr(self.wizard.draft, field_name) != event.value:
            self.wizard.update_field(field_name, event.value)

    def _go_next(self) -> None:
        ok, msg = self.wizard.check_step(self.STEP)
        if not ok or not self.wizard.advance():
            self._show_error(msg)
            return
        self._show_error("")
        d = self.wizard.draft
        log.info(
            "Step 2: ram=%s disk=%s cpu=%s databases=%s allocations=%s",
            d.ram, d.disk, d.cpu, d.databases, d.allocations,
        )
        from screens.s03_software import SoftwareScreen
        self.app.push_screen(SoftwareScreen())

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "btn_back":
            self.go_back()
        elif event.button.id == "btn_retry":
            self.wizard.retry("quota")
        elif event.button.id == "btn_next":
            self._go_next()

    def action_go_back(self) -> None:
        self.go_back()
