"""Envelope editing mode: the draggable graph plus live value read-outs."""
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.widgets import Label, Static

from components.envelope_graph import EnvelopeGraph
from envelope.editor_config import EditorConfig

# (label, value key) for each read-out, in display order
READOUTS = [
    ("Attack", "xa"),
    ("Peak", "ya"),
    ("Decay", "xd"),
    ("Sustain", "ys"),
    ("Release", "xr"),
]


class EnvelopeMode(Vertical):
    """Shows one envelope editor and the values it reports."""

    DEFAULT_CSS = """
    EnvelopeMode {
        width: 100%;
        height: 100%;
        border: heavy $accent;
        padding: 0 1;
    }

    #envelope-title {
        width: 100%;
        text-align: center;
        color: #ffd700;
        text-style: bold;
        margin-bottom: 1;
    }

    #envelope-values {
        width: 100%;
        height: 3;
        align: center middle;
        margin-top: 1;
    }

    .control-label {
        width: auto;
        color: $text-muted;
        margin-left: 2;
    }

    .control-value {
        width: 8;
        color: #00ff87;
        text-style: bold;
    }
    """

    def __init__(self, config: EditorConfig, **kwargs):
        super().__init__(**kwargs)
        self.config = config
        self._value_labels: dict[str, Label] = {}
        self.values: dict = {}

    def compose(self) -> ComposeResult:
        yield Static("A D S R   E N V E L O P E", id="envelope-title")
        yield EnvelopeGraph(self.config, id="envelope-graph")
        with Horizontal(id="envelope-values"):
            for label, key in READOUTS:
                yield Label(f"{label}:", classes="control-label")
                value_label = Label("", classes="control-value", id=f"{key}-display")
                self._value_labels[key] = value_label
                yield value_label

    def on_mount(self) -> None:
        graph = self.query_one(EnvelopeGraph)
        self._update_readouts(graph.values)

    def on_envelope_graph_changed(self, message: EnvelopeGraph.Changed) -> None:
        self._update_readouts(message.values)

    def _update_readouts(self, values: dict) -> None:
        self.values = dict(values)
        for key, label in self._value_labels.items():
            label.update(f"{values[key]:.2f}")
