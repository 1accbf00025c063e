from textual.app import App
from wizard.controller import PanelAPI, WizardController, WizardSnapshot
from logger import log


class PanelWizard(App):
    """Create Server wizard for the hosting panel."""

    TITLE = "Create Server"

    CSS = """
    Screen {
        background: $surface;
    }
    .title {
        text-style: bold;
        color: $accent;
        margin-bottom: 1;
    }
    #content {
        margin: 1 2;
    }
    #form {
        margin: 1 2;
    }
    #nav_buttons {
        dock: bottom;
        height: 3;
        align: center middle;
        margin: 1 2;
    }
    #footer_buttons {
        dock: bottom;
        height: 3;
        align: center middle;
    }
    Button {
        margin: 0 1;
    }
    #err_msg, #load_status {
        margin-top: 1;
    }
    DataTable {
        height: 12;
    }
    Select {
        margin-bottom: 1;
    }
    Input {
        margin-bottom: 1;
    }
    """

    def __init__(self, api: PanelAPI, servers_url: str = "") -> None:
        super().__init__()
        self.servers_url = servers_url
        self.wizard = WizardController(api)
        self._blocked_shown = False
        log.info("PanelWizard started")

    async def on_mount(self) -> None:
        from screens.s01_details import DetailsScreen
        self.wizard.subscribe(self._on_wizard_change)
        await self.push_screen(DetailsScreen())
        self.wizard.mount()

    def _on_wizard_change(self, snapshot: WizardSnapshot) -> None:
        if snapshot.blocked and not self._blocked_shown:
            self._blocked_shown = True
            log.warning("Quota exhausted: %s", snapshot.blocked_reason)
            from screens.s00_unavailable import UnavailableScreen
            self.push_screen(UnavailableScreen(snapshot.blocked_reason))
