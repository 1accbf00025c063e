from __future__ import annotations
import pyfiglet
from textual.widgets import Static

_ASCII = pyfiglet.figlet_format("Create Server", font="small")


class PanelHeader(Static):
    """Full-width ASCII-art header shown on every screen."""

    DEFAULT_CSS = """
    PanelHeader {
        color: #60a5fa;
        text-style: bold;
        width: 100%;
        padding: 0 2;
    }
    """

    def __init__(self) -> None:
        super().__init__(_ASCII)
