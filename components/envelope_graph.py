"""Draggable ADSR envelope graph widget.

Draws the envelope curve and its three handles into the terminal, one
terminal cell per surface pixel, and forwards mouse input to the
DragController.  Parents receive an ``EnvelopeGraph.Changed`` message with
the normalised values whenever a drag commits a change.
"""
from typing import List, Optional

import numpy as np
from rich.console import RenderableType
from rich.text import Text
from textual import events
from textual.message import Message
from textual.widget import Widget

from envelope.drag_controller import DragController, EnvelopeFrame, SurfaceRect
from envelope.editor_config import EditorConfig, NotificationMode
from envelope.envelope_model import Handle
from envelope.path_generator import sample_points
from envelope.viewport import ViewportGeometry

EMPTY = " "
CURVE = "•"
HANDLE = "◇"
HANDLE_ACTIVE = "◆"

# Max distance (cells) between a click and a handle for the click to grab it
HIT_RADIUS = 1.5


def rasterize(frame: EnvelopeFrame, viewport: ViewportGeometry,
              width: int, height: int) -> List[List[str]]:
    """Draw a frame into a ``height`` x ``width`` grid of characters."""
    grid = [[EMPTY] * width for _ in range(height)]
    if width <= 0 or height <= 0:
        return grid

    points = sample_points(frame.segments)
    if len(points):
        points = points + (frame.margins["left"], frame.margins["top"])
        sx, sy = viewport.scale_factors()
        ox, oy = viewport.offsets()
        pixels = points * (sx, sy) + (ox, oy)

        # Densify so long flat stretches (sustain) become continuous
        dense = [pixels[:1]]
        for start, end in zip(pixels[:-1], pixels[1:]):
            steps = int(np.ceil(np.max(np.abs(end - start)))) + 1
            dense.append(np.linspace(start, end, steps + 1)[1:])
        cells = np.floor(np.vstack(dense)).astype(int)
        cells[:, 0] = np.clip(cells[:, 0], 0, width - 1)
        cells[:, 1] = np.clip(cells[:, 1], 0, height - 1)
        for col, row in cells:
            grid[row][col] = CURVE

    for view in frame.handles:
        col = min(max(int(view.pixel_x), 0), width - 1)
        row = min(max(int(view.pixel_y), 0), height - 1)
        grid[row][col] = HANDLE_ACTIVE if view.active else HANDLE
    return grid


def handle_at(frame: EnvelopeFrame, px: float, py: float,
              radius: float = HIT_RADIUS) -> Optional[Handle]:
    """Return the handle nearest to (px, py) within ``radius``, if any."""
    best, best_dist = None, radius
    for view in frame.handles:
        dist = float(np.hypot(view.pixel_x - px, view.pixel_y - py))
        if dist <= best_dist:
            best, best_dist = view.handle, dist
    return best


class EnvelopeGraph(Widget):
    """Interactive envelope graph."""

    DEFAULT_CSS = """
    EnvelopeGraph {
        width: 100%;
        height: 1fr;
        min-height: 8;
        background: rgb(40, 56, 68);
        color: rgb(221, 226, 232);
    }
    """

    class Changed(Message):
        """Posted after a drag commits new envelope values."""

        def __init__(self, graph: "EnvelopeGraph", values: dict) -> None:
            self.graph = graph
            self.values = values
            super().__init__()

    def __init__(self, config: EditorConfig, **kwargs):
        super().__init__(**kwargs)
        if config.notification_mode is NotificationMode.COMBINED:
            self.controller = DragController(config, on_change=self._mark_changed)
        else:
            self.controller = DragController(
                config,
                on_attack_change=self._mark_changed,
                on_decay_change=self._mark_changed,
                on_sustain_change=self._mark_changed,
                on_release_change=self._mark_changed,
            )
        self._changed = False

    # ── Rendering ────────────────────────────────────────────────

    def render(self) -> RenderableType:
        width, height = self.size.width, self.size.height
        grid = rasterize(self.controller.frame(), self.controller.viewport, width, height)

        text = Text(no_wrap=True, overflow="crop")
        for row_idx, row in enumerate(grid):
            if row_idx:
                text.append("\n")
            for char in row:
                if char == HANDLE_ACTIVE:
                    text.append(char, style="bold white")
                elif char == HANDLE:
                    text.append(char, style="yellow")
                else:
                    text.append(char)
        return text

    # ── Mouse / layout events ────────────────────────────────────

    def _surface_rect(self) -> SurfaceRect:
        return SurfaceRect(0, 0, self.size.width, self.size.height)

    def on_mount(self) -> None:
        self.controller.resize(self.size.width, self.size.height)

    def on_resize(self, event: events.Resize) -> None:
        self.controller.resize(event.size.width, event.size.height)
        self.refresh()

    def on_mouse_down(self, event: events.MouseDown) -> None:
        # Pointer at the centre of the clicked cell
        px, py = event.x + 0.5, event.y + 0.5
        self.controller.resize(self.size.width, self.size.height)
        handle = handle_at(self.controller.frame(), px, py)
        if handle is not None and self.controller.pointer_down(handle):
            self.refresh()

    def on_mouse_move(self, event: events.MouseMove) -> None:
        if not self.controller.is_dragging:
            return
        self._changed = False
        if self.controller.pointer_move(event.x + 0.5, event.y + 0.5, self._surface_rect()):
            self.refresh()
        if self._changed:
            self._changed = False
            self.post_message(self.Changed(self, self.controller.values()))

    def on_mouse_up(self, event: events.MouseUp) -> None:
        if self.controller.is_dragging:
            self.controller.pointer_up()
            self.refresh()

    def on_leave(self, event: events.Leave) -> None:
        if self.controller.is_dragging:
            self.controller.pointer_leave()
            self.refresh()

    # ── Notifications ────────────────────────────────────────────

    def _mark_changed(self, *_args) -> None:
        # Split mode may call back once per phase; one message per move
        self._changed = True

    @property
    def values(self) -> dict:
        return self.controller.values()
