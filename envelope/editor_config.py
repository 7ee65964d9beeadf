"""Editor construction configuration.

Plain-dict configuration (as stored in config.json) is validated into an
EditorConfig here.  Missing keys are filled from DEFAULT_ENVELOPE_CONFIG the
same way presets are filled from their defaults.
"""
from enum import Enum
from typing import Mapping, Optional

from .envelope_model import EnvelopeParams, PhaseRatios, RatioShape, is_number
from .errors import ConfigurationError


class NotificationMode(Enum):
    """How committed changes are reported to the host."""
    SPLIT = "split"          # one callback per phase
    COMBINED = "combined"    # a single on_change with every value


# Box is 10 x 5 design units with a 1 unit margin on each side
DEFAULT_ENVELOPE_CONFIG: dict = {
    "default_attack_width": 1.0,
    "default_decay_width": 1.5,
    "default_release_width": 1.5,
    "default_sustain_level": 0.6,
    "attack_level": 1.0,
    "ratios": None,
    "ratio_shape": "three_way",
    "box_size": {"width": 10.0, "height": 5.0},
    "margins": {"top": 1.0, "right": 1.0, "bottom": 1.0, "left": 1.0},
    "uniform_scale": False,
    "notification_mode": "combined",
}

CONFIG_KEYS = list(DEFAULT_ENVELOPE_CONFIG.keys())

_MARGIN_SIDES = ("top", "right", "bottom", "left")


def _parse_enum(enum_cls, value, key):
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        choices = ", ".join(m.value for m in enum_cls)
        raise ConfigurationError(f"{key} must be one of: {choices} (got {value!r})") from None


class EditorConfig:
    """Validated configuration for one envelope editor session."""

    def __init__(
        self,
        params: EnvelopeParams,
        ratios: PhaseRatios,
        box_size: tuple,
        margins: dict,
        uniform_scale: bool = False,
        notification_mode: NotificationMode = NotificationMode.COMBINED,
    ):
        self.params = params
        self.ratios = ratios
        self.box_size = box_size
        self.margins = margins
        self.uniform_scale = uniform_scale
        self.notification_mode = notification_mode

    @property
    def outer_size(self) -> tuple:
        """Box plus margins: the whole viewBox the surface displays."""
        width, height = self.box_size
        m = self.margins
        return width + m["left"] + m["right"], height + m["top"] + m["bottom"]

    @classmethod
    def from_dict(cls, data: Optional[Mapping] = None) -> "EditorConfig":
        """Build a config from a (possibly partial) dict.

        Raises:
            ConfigurationError: a non-mapping section, unknown keys,
                non-numeric values, bad ratios or an unknown mode name.
        """
        if data is not None and not isinstance(data, Mapping):
            raise ConfigurationError(
                f"envelope configuration must be a mapping, got {type(data).__name__}"
            )
        data = dict(data or {})
        unknown = set(data) - set(CONFIG_KEYS)
        if unknown:
            raise ConfigurationError(f"Unknown configuration keys: {sorted(unknown)}")

        merged = dict(DEFAULT_ENVELOPE_CONFIG)
        merged.update(data)

        for key in ("default_attack_width", "default_decay_width",
                    "default_release_width", "default_sustain_level", "attack_level"):
            if not is_number(merged[key]):
                raise ConfigurationError(f"{key} must be a finite number, got {merged[key]!r}")

        box = merged["box_size"]
        if not isinstance(box, Mapping) or not all(
            is_number(box.get(k)) and box.get(k) > 0 for k in ("width", "height")
        ):
            raise ConfigurationError("box_size needs positive numeric 'width' and 'height'")

        margins = dict(DEFAULT_ENVELOPE_CONFIG["margins"])
        if merged["margins"] is not None:
            if not isinstance(merged["margins"], Mapping):
                raise ConfigurationError("margins must be a mapping")
            margins.update(merged["margins"])
        for side in _MARGIN_SIDES:
            if not is_number(margins[side]) or margins[side] < 0:
                raise ConfigurationError(f"margin '{side}' must be a non-negative number")

        shape = _parse_enum(RatioShape, merged["ratio_shape"], "ratio_shape")
        ratios = PhaseRatios.from_mapping(merged["ratios"], shape)

        params = EnvelopeParams(
            attack_width=float(merged["default_attack_width"]),
            decay_width=float(merged["default_decay_width"]),
            sustain_level=float(merged["default_sustain_level"]),
            release_width=float(merged["default_release_width"]),
            attack_level=float(merged["attack_level"]),
        )
        return cls(
            params=params,
            ratios=ratios,
            box_size=(float(box["width"]), float(box["height"])),
            margins={side: float(margins[side]) for side in _MARGIN_SIDES},
            uniform_scale=bool(merged["uniform_scale"]),
            notification_mode=_parse_enum(
                NotificationMode, merged["notification_mode"], "notification_mode"
            ),
        )
