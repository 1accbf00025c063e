from __future__ import annotations
from textual.app import ComposeResult
from textual.screen import Screen
from textual.widgets import Button, Footer, Static
from textual.containers import Vertical, Horizontal
from widgets.panel_header import PanelHeader
from logger import log


class CreatedScreen(Screen):
    """Server created: show the handle and where to find it, then exit."""

    BINDINGS = [("enter", "finish", "Finish")]

    def __init__(self, handle: str) -> None:
        super().__init__()
        self.handle = handle

    def compose(self) -> ComposeResult:
        yield PanelHeader()
        with Vertical(id="content"):
            yield Static("Server Created", classes="title")
            yield Static("", id="summary")
        with Horizontal(id="nav_buttons"):
            yield Button("✓ Finish & Exit", id="btn_finish", variant="success")
        yield Footer()

    def on_mount(self) -> None:
        self.query_one("#summary", Static).update(self._build_summary())
        log.info("Created screen shown for %s", self.handle)

    def _build_summary(self) -> str:
        lines = ["[bold]Your server is being deployed.[/bold]\n"]
        lines.append(f"  Server        : [cyan]{self.handle}[/cyan]")
        servers_url = getattr(self.app, "servers_url", "")
        if servers_url:
            lines.append(f"  Manage it at  : {servers_url}")
        return "\n".join(lines)

    def action_finish(self) -> None:
        self.app.exit(self.handle)

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "btn_finish":
            self.action_finish()
