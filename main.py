#!/usr/bin/env python3
"""Envolvente - ADSR envelope editor TUI, main entry point."""
import logging
from typing import Optional

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.logging import TextualHandler
from textual.widgets import Footer, Header

from config_manager import ConfigManager
from envelope.editor_config import EditorConfig
from modes.envelope_mode import EnvelopeMode


def setup_logging(level: str) -> None:
    """Send log records to the Textual devtools console."""
    logging.basicConfig(level=level, handlers=[TextualHandler()], force=True)


class EnvolventeApp(App):
    """Terminal envelope editor."""

    VERSION = "0.2.0"

    BINDINGS = [
        Binding("escape", "quit", "Quit", show=True),
    ]

    def __init__(self, config_manager: Optional[ConfigManager] = None):
        super().__init__()
        self.title = f"Envolvente v{self.VERSION}"
        self.sub_title = "Drag the handles to shape the envelope"
        self.config_manager = config_manager or ConfigManager()
        # Invalid configuration fails here, before anything is drawn
        self.editor_config = EditorConfig.from_dict(self.config_manager.get_envelope_config())

    def compose(self) -> ComposeResult:
        yield Header()
        yield EnvelopeMode(self.editor_config, id="envelope-mode")
        yield Footer()


def main():
    """Main entry point."""
    config_manager = ConfigManager()
    setup_logging(config_manager.get_log_level())
    app = EnvolventeApp(config_manager)
    app.run()


if __name__ == "__main__":
    main()
