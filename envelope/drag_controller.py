"""Drag interaction state machine for the envelope editor.

States are Idle and Dragging(handle).  Pointer presses on a handle start a
drag, pointer moves are converted to design units and offered to the model,
and pointer release or the pointer leaving the surface ends the drag.  After
every move the committed values are compared with those before the move and
the host is notified of whatever actually changed.

All handlers run synchronously inside the host's input event delivery.  A
move always recomputes from the absolute pointer position, so dropped or
coalesced events never leave the state out of step with the pointer.
"""
import logging
from dataclasses import replace
from typing import Callable, List, NamedTuple, Optional, Tuple, Union

from .editor_config import EditorConfig, NotificationMode
from .envelope_model import EnvelopeModel, EnvelopeParams, Handle
from .errors import ConfigurationError
from .path_generator import Segment, generate_stroke
from .viewport import ViewportGeometry

logger = logging.getLogger(__name__)


class SurfaceRect(NamedTuple):
    """Pixel rectangle of the interactive surface, as measured by the host."""
    left: float
    top: float
    width: float
    height: float


class HandleView(NamedTuple):
    """Render data for one handle."""
    handle: Handle
    x: float            # design units, inside the box
    y: float
    pixel_x: float      # surface pixels, margins included
    pixel_y: float
    active: bool


class EnvelopeFrame(NamedTuple):
    """Everything a renderer needs to draw the current envelope."""
    segments: List[Segment]
    handles: List[HandleView]
    margins: dict


class DragController:
    """Owns the drag state of one envelope editor.

    Args:
        config: validated EditorConfig.
        on_change: combined-mode callback receiving ``{xa, ya, xd, ys, xr}``.
        on_attack_change: split-mode callback receiving ``{xa, ya}``.
        on_decay_change / on_sustain_change / on_release_change: split-mode
            callbacks receiving a single float.

    Only the callbacks of the configured notification mode may be given.
    """

    def __init__(
        self,
        config: EditorConfig,
        on_change: Optional[Callable[[dict], None]] = None,
        on_attack_change: Optional[Callable[[dict], None]] = None,
        on_decay_change: Optional[Callable[[float], None]] = None,
        on_sustain_change: Optional[Callable[[float], None]] = None,
        on_release_change: Optional[Callable[[float], None]] = None,
    ):
        split_callbacks = (on_attack_change, on_decay_change, on_sustain_change, on_release_change)
        mode = config.notification_mode
        if mode is NotificationMode.COMBINED and any(cb is not None for cb in split_callbacks):
            raise ConfigurationError("Per-phase callbacks given but notification_mode is 'combined'")
        if mode is NotificationMode.SPLIT and on_change is not None:
            raise ConfigurationError("on_change given but notification_mode is 'split'")

        self.config = config
        self.model = EnvelopeModel(config.box_size, replace(config.params), config.ratios)
        self.viewport = ViewportGeometry(config.outer_size, uniform_scale=config.uniform_scale)
        self.notification_mode = mode

        self.on_change = on_change
        self.on_attack_change = on_attack_change
        self.on_decay_change = on_decay_change
        self.on_sustain_change = on_sustain_change
        self.on_release_change = on_release_change

        self.active_handle: Optional[Handle] = None

    # ── State ────────────────────────────────────────────────────

    @property
    def is_dragging(self) -> bool:
        return self.active_handle is not None

    # ── Input events ─────────────────────────────────────────────

    def pointer_down(self, handle: Union[Handle, str]) -> bool:
        """Start dragging ``handle``.  Returns False if a drag is already active."""
        handle = Handle.parse(handle)
        if self.active_handle is not None:
            logger.debug("Ignoring press on %s, already dragging %s",
                         handle.value, self.active_handle.value)
            return False
        self.active_handle = handle
        logger.debug("Drag started on %s", handle.value)
        return True

    def pointer_move(
        self,
        px: float,
        py: float,
        surface: Optional[Union[SurfaceRect, Tuple[float, float, float, float]]] = None,
    ) -> bool:
        """Apply a pointer position to the active handle.

        ``px``/``py`` are in the same pixel space as ``surface``; without a
        surface they are taken as relative to the surface's top-left corner
        and the last measurement is used.  Returns True when any committed
        value changed.
        """
        if self.active_handle is None:
            return False

        left, top = 0.0, 0.0
        if surface is not None:
            left, top, width, height = surface
            self.viewport.resize(width, height)

        # Recomputed each move; a resize may have happened since the last one
        x, y = self.viewport.to_design_point(px - left, py - top)
        x -= self.config.margins["left"]
        y -= self.config.margins["top"]

        before = self.model.snapshot()
        self._dispatch(self.active_handle, x, y)
        return self._notify_changes(before)

    def pointer_up(self) -> None:
        """End the drag."""
        self._end_drag("released")

    def pointer_leave(self) -> None:
        """The pointer left the surface: end the drag.  Re-entry does not resume it."""
        self._end_drag("left surface")

    def resize(self, width: float, height: float) -> bool:
        """Record a new surface measurement."""
        return self.viewport.resize(width, height)

    # ── Render output ────────────────────────────────────────────

    def segments(self) -> List[Segment]:
        return generate_stroke(
            self.model.phase_lengths(),
            self.model.params.sustain_level,
            self.model.box.height,
        )

    def frame(self) -> EnvelopeFrame:
        margins = self.config.margins
        handles = []
        for handle in Handle:
            x, y = self.model.handle_position(handle)
            pixel_x, pixel_y = self.viewport.to_pixel_point(
                x + margins["left"], y + margins["top"]
            )
            handles.append(HandleView(
                handle, x, y, pixel_x, pixel_y, handle is self.active_handle,
            ))
        return EnvelopeFrame(self.segments(), handles, dict(margins))

    def values(self) -> dict:
        """Current normalised values ``{xa, ya, xd, ys, xr}``."""
        return self.model.normalized()

    # ── Internal helpers ─────────────────────────────────────────

    def _end_drag(self, reason: str) -> None:
        if self.active_handle is not None:
            logger.debug("Drag on %s ended (%s)", self.active_handle.value, reason)
        self.active_handle = None

    def _dispatch(self, handle: Handle, x: float, y: float) -> None:
        attack, decay, sustain, _release = self.model.phase_lengths()
        if handle is Handle.ATTACK:
            # Attack level (y) is not draggable
            self.model.try_set_attack(x)
        elif handle is Handle.DECAY_SUSTAIN:
            self.model.try_set_decay_sustain(x - attack, y)
        else:
            self.model.try_set_release(x - (attack + decay + sustain))

    def _notify_changes(self, before: EnvelopeParams) -> bool:
        after = self.model.params
        attack_changed = before.attack_width != after.attack_width
        decay_changed = before.decay_width != after.decay_width
        sustain_changed = before.sustain_level != after.sustain_level
        release_changed = before.release_width != after.release_width

        if not (attack_changed or decay_changed or sustain_changed or release_changed):
            return False

        values = self.model.normalized()
        logger.debug("Committed %s", values)

        if self.notification_mode is NotificationMode.COMBINED:
            if self.on_change:
                self.on_change(values)
            return True

        if attack_changed and self.on_attack_change:
            self.on_attack_change({"xa": values["xa"], "ya": values["ya"]})
        if decay_changed and self.on_decay_change:
            self.on_decay_change(values["xd"])
        if sustain_changed and self.on_sustain_change:
            self.on_sustain_change(values["ys"])
        if release_changed and self.on_release_change:
            self.on_release_change(values["xr"])
        return True
