"""Viewport geometry: maps the fixed design-unit box onto the measured surface.

The envelope is authored in a logical box (design units).  The host surface
that displays it is measured in pixels (terminal cells for the TUI) and
changes size whenever the layout does.  Pointer coordinates arrive in pixels
and are converted back into design units here.
"""
import logging
from typing import NamedTuple, Optional, Tuple

logger = logging.getLogger(__name__)


class BoxGeometry(NamedTuple):
    """Fixed logical coordinate space, in design units."""
    width: float
    height: float


class PixelGeometry(NamedTuple):
    """Measured on-screen size of the surface."""
    width: float
    height: float


def scale_factor(pixel_size: float, box_size: float) -> float:
    """Pixels per design unit along one axis."""
    return pixel_size / box_size


class ViewportGeometry:
    """Converts between design units and surface pixels.

    Two scaling configurations are supported:

    - independent (``uniform_scale=False``): each axis stretches to fill the
      surface, so the horizontal and vertical factors differ.
    - uniform (``uniform_scale=True``): both axes share the smaller factor
      and the box is centred in the surface, the way an SVG viewBox with
      ``preserveAspectRatio="xMidYMid meet"`` is laid out.

    Nothing is cached between calls; every conversion uses the latest
    measurement so a resize in the middle of a drag is picked up on the
    next pointer move.
    """

    X = "x"
    Y = "y"

    def __init__(
        self,
        box: Tuple[float, float],
        pixel: Optional[Tuple[float, float]] = None,
        uniform_scale: bool = False,
    ):
        self.box = BoxGeometry(float(box[0]), float(box[1]))
        self.uniform_scale = uniform_scale
        # Until the collaborator measures the surface, one pixel per unit
        self.pixel = PixelGeometry(self.box.width, self.box.height)
        if pixel is not None:
            self.resize(*pixel)

    def resize(self, width: float, height: float) -> bool:
        """Record a new surface measurement.

        Returns False (keeping the previous measurement) when the surface
        is collapsed to a non-positive size, which happens while a layout
        is still being computed.
        """
        if width <= 0 or height <= 0:
            logger.debug("Ignoring collapsed surface measurement %sx%s", width, height)
            return False
        self.pixel = PixelGeometry(float(width), float(height))
        return True

    def scale_factors(self) -> Tuple[float, float]:
        """Return (horizontal, vertical) pixels per design unit."""
        sx = scale_factor(self.pixel.width, self.box.width)
        sy = scale_factor(self.pixel.height, self.box.height)
        if self.uniform_scale:
            shared = min(sx, sy)
            return shared, shared
        return sx, sy

    def offsets(self) -> Tuple[float, float]:
        """Pixel offset of the box's top-left corner inside the surface."""
        if not self.uniform_scale:
            return 0.0, 0.0
        sx, sy = self.scale_factors()
        return (
            (self.pixel.width - self.box.width * sx) / 2.0,
            (self.pixel.height - self.box.height * sy) / 2.0,
        )

    def to_design_units(self, pixel_delta: float, axis: str) -> float:
        """Convert a pixel distance along ``axis`` into design units."""
        sx, sy = self.scale_factors()
        if axis == self.X:
            return pixel_delta / sx
        if axis == self.Y:
            return pixel_delta / sy
        raise ValueError(f"Unknown axis {axis!r}, expected 'x' or 'y'")

    def to_design_point(self, px: float, py: float) -> Tuple[float, float]:
        """Convert a surface-relative pixel position into box coordinates."""
        ox, oy = self.offsets()
        return (
            self.to_design_units(px - ox, self.X),
            self.to_design_units(py - oy, self.Y),
        )

    def to_pixel_point(self, x: float, y: float) -> Tuple[float, float]:
        """Convert box coordinates into a surface-relative pixel position."""
        sx, sy = self.scale_factors()
        ox, oy = self.offsets()
        return ox + x * sx, oy + y * sy
