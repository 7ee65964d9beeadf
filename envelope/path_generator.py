"""Envelope stroke generation.

Turns phase widths and the sustain level into a list of drawing segments.
Attack, decay and release are drawn with a fixed asymmetric cubic that
reads as an exponential curve; sustain is a straight line.  The segments can
be serialised into an SVG path ``d`` string or flattened into points for
raster renderers such as the terminal graph.
"""
from dataclasses import dataclass
from typing import List, Sequence, Tuple, Union

import numpy as np


@dataclass(frozen=True)
class MoveTo:
    """Absolute move (SVG ``M``)."""
    x: float
    y: float


@dataclass(frozen=True)
class CubicRelative:
    """Relative cubic bezier (SVG ``c``) with exponential-looking controls.

    Control point 1 sits at (dx/5, dy/2), control point 2 at (dx/2, dy),
    the endpoint at (dx, dy), all relative to the current point.
    """
    dx: float
    dy: float

    @property
    def control1(self) -> Tuple[float, float]:
        return self.dx / 5, self.dy / 2

    @property
    def control2(self) -> Tuple[float, float]:
        return self.dx / 2, self.dy

    @property
    def end(self) -> Tuple[float, float]:
        return self.dx, self.dy


@dataclass(frozen=True)
class LineRelative:
    """Relative straight line (SVG ``l``)."""
    dx: float
    dy: float


Segment = Union[MoveTo, CubicRelative, LineRelative]


def generate_stroke(
    phase_lengths: Sequence[float],
    sustain_level: float,
    box_height: float,
) -> List[Segment]:
    """Build the envelope outline starting from the bottom-left corner."""
    attack_width, decay_width, sustain_width, release_width = phase_lengths
    return [
        MoveTo(0, box_height),
        CubicRelative(attack_width, -box_height),
        CubicRelative(decay_width, box_height * (1 - sustain_level)),
        LineRelative(sustain_width, 0),
        CubicRelative(release_width, box_height * sustain_level),
    ]


def _fmt(value: float) -> str:
    # 20.0 -> "20", 0.5 -> "0.5"
    return f"{value:g}" if float(value).is_integer() else repr(float(value))


def to_svg_path(segments: Sequence[Segment]) -> str:
    """Serialise segments into an SVG path ``d`` attribute."""
    strokes = []
    for seg in segments:
        if isinstance(seg, MoveTo):
            strokes.append(f"M {_fmt(seg.x)} {_fmt(seg.y)}")
        elif isinstance(seg, CubicRelative):
            coords = (*seg.control1, *seg.control2, *seg.end)
            strokes.append("c " + " ".join(_fmt(v) for v in coords))
        elif isinstance(seg, LineRelative):
            strokes.append(f"l {_fmt(seg.dx)} {_fmt(seg.dy)}")
        else:
            raise TypeError(f"Unsupported segment {seg!r}")
    return " ".join(strokes)


def sample_points(segments: Sequence[Segment], steps: int = 32) -> np.ndarray:
    """Flatten segments into an (N, 2) array of absolute points.

    Each cubic is evaluated at ``steps`` evenly spaced parameter values;
    lines contribute their endpoint only.
    """
    t = np.linspace(0.0, 1.0, steps + 1)[1:, np.newaxis]
    points = []
    current = np.zeros(2)
    for seg in segments:
        if isinstance(seg, MoveTo):
            current = np.array([seg.x, seg.y], dtype=float)
            points.append(current[np.newaxis, :])
        elif isinstance(seg, CubicRelative):
            p1 = current + seg.control1
            p2 = current + seg.control2
            p3 = current + seg.end
            curve = (
                (1 - t) ** 3 * current
                + 3 * (1 - t) ** 2 * t * p1
                + 3 * (1 - t) * t ** 2 * p2
                + t ** 3 * p3
            )
            points.append(curve)
            current = p3
        elif isinstance(seg, LineRelative):
            current = current + (seg.dx, seg.dy)
            points.append(current[np.newaxis, :])
        else:
            raise TypeError(f"Unsupported segment {seg!r}")
    if not points:
        return np.empty((0, 2))
    return np.vstack(points)
