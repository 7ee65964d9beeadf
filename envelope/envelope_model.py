"""Envelope model: the four editable ADSR quantities and their bounds.

Phase widths are expressed in design units of the envelope box; levels are
normalised to 0-1.  Each phase may only use the share of the box width its
ratio reserves for it.  Candidates outside that budget are rejected (the
stored value is kept), never clamped to the boundary.
"""
import math
from dataclasses import dataclass
from enum import Enum
from typing import Mapping, NamedTuple, Optional, Tuple, Union

from .errors import ConfigurationError, InvalidHandle
from .viewport import BoxGeometry


class Handle(Enum):
    """Draggable control points on the envelope curve."""
    ATTACK = "attack"
    DECAY_SUSTAIN = "decaysustain"
    RELEASE = "release"

    @classmethod
    def parse(cls, value: Union["Handle", str]) -> "Handle":
        """Accept a Handle or its string id; anything else is InvalidHandle."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            raise InvalidHandle(value) from None


class RatioShape(Enum):
    """Which keys a ratio configuration carries.

    THREE_WAY: attack/decay/release; sustain gets whatever is left of 1.
    FOUR_WAY:  attack/decay/sustain/release; sustain's share is explicit.
    """
    THREE_WAY = "three_way"
    FOUR_WAY = "four_way"


# Original short key names, still accepted in configuration files
_RATIO_ALIASES = {"xa": "attack", "xd": "decay", "xs": "sustain", "xr": "release"}

_RATIO_KEYS = {
    RatioShape.THREE_WAY: ("attack", "decay", "release"),
    RatioShape.FOUR_WAY: ("attack", "decay", "sustain", "release"),
}

DEFAULT_RATIO = 0.25


def is_number(value) -> bool:
    """True for finite ints/floats (bools excluded)."""
    return (
        isinstance(value, (int, float))
        and not isinstance(value, bool)
        and math.isfinite(value)
    )


class PhaseRatios(NamedTuple):
    """Fractions of the box width budgeted to each phase."""
    attack: float
    decay: float
    release: float
    sustain: float  # reserved sustain fraction (explicit or remainder)
    shape: RatioShape

    @classmethod
    def from_mapping(
        cls,
        raw: Optional[Mapping],
        shape: RatioShape = RatioShape.THREE_WAY,
    ) -> "PhaseRatios":
        """Validate a ratio mapping for the given shape.

        A missing mapping gives the equal 0.25 split.  Anything partially
        specified, non-numeric, negative or summing above 1 is a
        ConfigurationError.
        """
        keys = _RATIO_KEYS[shape]
        if raw is None:
            values = {k: DEFAULT_RATIO for k in keys}
        else:
            if not isinstance(raw, Mapping):
                raise ConfigurationError(f"ratios must be a mapping, got {type(raw).__name__}")
            values = {}
            for key, value in raw.items():
                name = _RATIO_ALIASES.get(key, key)
                if name in values:
                    raise ConfigurationError(f"Ratio '{name}' is given more than once")
                values[name] = value

            unknown = set(values) - set(_RATIO_KEYS[RatioShape.FOUR_WAY])
            if unknown:
                raise ConfigurationError(f"Unknown ratio keys: {sorted(unknown)}")
            if shape is RatioShape.THREE_WAY and "sustain" in values:
                raise ConfigurationError(
                    "Three-way ratios must not define 'sustain'; "
                    "use ratio_shape='four_way' to budget it explicitly"
                )
            bad = [k for k in keys if not is_number(values.get(k))]
            if bad:
                raise ConfigurationError(
                    f"ratios needs numeric values for: {', '.join(keys)} "
                    f"(invalid or missing: {', '.join(bad)})"
                )

        negative = [k for k in keys if values[k] < 0]
        if negative:
            raise ConfigurationError(f"Ratios must not be negative: {negative}")
        total = sum(values[k] for k in keys)
        if total > 1.0 + 1e-9:
            raise ConfigurationError(f"Ratios sum to {total:g}, must not exceed 1")

        if shape is RatioShape.FOUR_WAY:
            sustain = float(values["sustain"])
        else:
            sustain = 1.0 - total
        return cls(
            attack=float(values["attack"]),
            decay=float(values["decay"]),
            release=float(values["release"]),
            sustain=sustain,
            shape=shape,
        )


@dataclass
class EnvelopeParams:
    """Current envelope state, widths in design units, levels 0-1."""
    attack_width: float
    decay_width: float
    sustain_level: float
    release_width: float
    attack_level: float = 1.0


class AxisAcceptance(NamedTuple):
    """Per-axis result of a two-axis candidate."""
    x_accepted: bool
    y_accepted: bool


class EnvelopeModel:
    """Owns EnvelopeParams and enforces per-phase bounds."""

    def __init__(
        self,
        box: Tuple[float, float],
        params: EnvelopeParams,
        ratios: Union[PhaseRatios, Mapping, None] = None,
        ratio_shape: RatioShape = RatioShape.THREE_WAY,
    ):
        if len(box) != 2 or not all(is_number(v) and v > 0 for v in box):
            raise ConfigurationError(f"box_size needs two positive numbers, got {box!r}")
        for name in ("attack_width", "decay_width", "sustain_level",
                     "release_width", "attack_level"):
            if not is_number(getattr(params, name)):
                raise ConfigurationError(f"{name} must be a finite number")

        self.box = BoxGeometry(float(box[0]), float(box[1]))
        if isinstance(ratios, PhaseRatios):
            self.ratios = ratios
        else:
            self.ratios = PhaseRatios.from_mapping(ratios, ratio_shape)
        self.params = params

    # ── Queries ──────────────────────────────────────────────────

    @property
    def attack_level(self) -> float:
        """Peak level after attack.  Reported, never changed by dragging."""
        return self.params.attack_level

    def phase_budget(self, phase: str) -> float:
        """Maximum width (design units) the given phase may take."""
        return getattr(self.ratios, phase) * self.box.width

    def phase_lengths(self) -> Tuple[float, float, float, float]:
        """Return (attack, decay, sustain, release) widths.

        The sustain width is whatever the other phases and the reserved
        release space leave over; it goes negative when defaults and ratios
        disagree, which just degenerates the drawing.
        """
        p = self.params
        reserved = self.ratios.sustain * self.box.width
        sustain_width = self.box.width - p.attack_width - p.decay_width - reserved
        return p.attack_width, p.decay_width, sustain_width, p.release_width

    def handle_position(self, handle: Union[Handle, str]) -> Tuple[float, float]:
        """Design-unit position of a handle inside the box."""
        handle = Handle.parse(handle)
        attack, decay, sustain, release = self.phase_lengths()
        if handle is Handle.ATTACK:
            return attack, 0.0
        if handle is Handle.DECAY_SUSTAIN:
            return attack + decay, self.box.height * (1 - self.params.sustain_level)
        return attack + decay + sustain + release, self.box.height

    def normalized(self) -> dict:
        """Current values relative to each phase's budget.

        Keys follow the host callback convention: xa/ya attack width and
        level, xd decay, ys sustain level, xr release.
        """
        p = self.params
        return {
            "xa": _ratio_of(p.attack_width, self.phase_budget("attack")),
            "ya": p.attack_level,
            "xd": _ratio_of(p.decay_width, self.phase_budget("decay")),
            "ys": p.sustain_level,
            "xr": _ratio_of(p.release_width, self.phase_budget("release")),
        }

    def snapshot(self) -> EnvelopeParams:
        """Copy of the current params, for diffing."""
        p = self.params
        return EnvelopeParams(
            p.attack_width, p.decay_width, p.sustain_level,
            p.release_width, p.attack_level,
        )

    # ── Mutators ─────────────────────────────────────────────────

    def try_set_attack(self, candidate_x: float) -> bool:
        """Set the attack width if it fits the attack budget."""
        if 0 <= candidate_x <= self.phase_budget("attack"):
            self.params.attack_width = candidate_x
            return True
        return False

    def try_set_decay_sustain(self, candidate_x: float, candidate_y: float) -> AxisAcceptance:
        """Set decay width (x, relative to the attack handle) and sustain
        level (y, from the top of the box).  Each axis is accepted on its own.
        """
        x_ok = 0 <= candidate_x <= self.phase_budget("decay")
        if x_ok:
            self.params.decay_width = candidate_x

        level = 1 - candidate_y / self.box.height
        y_ok = 0 <= level <= 1
        if y_ok:
            self.params.sustain_level = level
        return AxisAcceptance(x_ok, y_ok)

    def try_set_release(self, candidate_x: float) -> bool:
        """Set the release width (x relative to the end of sustain)."""
        if 0 <= candidate_x <= self.phase_budget("release"):
            self.params.release_width = candidate_x
            return True
        return False


def _ratio_of(value: float, budget: float) -> float:
    # A zero budget means the phase can never be dragged away from 0
    if budget == 0:
        return 0.0
    return value / budget
