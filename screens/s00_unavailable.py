from textual.app import ComposeResult
from textual.screen import Screen
from textual.widgets import Footer, Button, Static
from textual.containers import Container, Vertical
from widgets.panel_header import PanelHeader


class UnavailableScreen(Screen):
    """Terminal screen for accounts that cannot create a server at all."""

    BINDINGS = [("q", "leave", "Quit")]

    def __init__(self, reason: str) -> None:
        super().__init__()
        self.reason = reason

    def compose(self) -> ComposeResult:
        yield PanelHeader()
        with Vertical(id="content"):
            yield Static(f"[bold red]{self.reason}[/bold red]", id="blocked_msg")
            yield Static(
                "Free up a server slot or ask an administrator for more resources."
            )
        with Container(id="footer_buttons"):
            yield Button("Exit", id="btn_exit", variant="error")
        yield Footer()

    def action_leave(self) -> None:
        self.app.exit()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "btn_exit":
            self.action_leave()
