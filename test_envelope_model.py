"""ABOUTME: Tests for the envelope model - phase lengths, handle positions and bounds.
ABOUTME: Out-of-range candidates must be rejected without touching stored values."""
import math
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent))

from envelope.envelope_model import (
    AxisAcceptance,
    EnvelopeModel,
    EnvelopeParams,
    Handle,
    PhaseRatios,
    RatioShape,
)
from envelope.errors import ConfigurationError, InvalidHandle

QUARTERS = {"attack": 0.25, "decay": 0.25, "release": 0.25}


def make_model(attack=0.0, decay=0.0, sustain=0.5, release=0.0,
               ratios=QUARTERS, shape=RatioShape.THREE_WAY, box=(100, 100)):
    params = EnvelopeParams(attack, decay, sustain, release)
    return EnvelopeModel(box, params, ratios, shape)


def test_phase_lengths_reserve_sustain_remainder():
    model = make_model()
    assert model.phase_lengths() == (0, 0, 75, 0)


@pytest.mark.parametrize("ratios,shape", [
    ({"attack": 0.25, "decay": 0.25, "release": 0.25}, RatioShape.THREE_WAY),
    ({"attack": 0.1, "decay": 0.3, "release": 0.2}, RatioShape.THREE_WAY),
    ({"attack": 0.2, "decay": 0.2, "sustain": 0.3, "release": 0.2}, RatioShape.FOUR_WAY),
    (None, RatioShape.FOUR_WAY),
])
def test_phase_lengths_reconstruct_box_width(ratios, shape):
    model = make_model(attack=7.0, decay=3.0, release=5.0, ratios=ratios, shape=shape)
    attack, decay, sustain, release = model.phase_lengths()
    reserved = model.ratios.sustain * model.box.width
    assert attack + decay + sustain + reserved == pytest.approx(model.box.width)
    assert release == 5.0


def test_negative_sustain_width_is_not_clamped():
    model = make_model(attack=60.0, decay=30.0)
    assert model.phase_lengths()[2] == pytest.approx(-15.0)


def test_attack_scenario_rejects_then_accepts():
    model = make_model()
    assert model.try_set_attack(30) is False
    assert model.params.attack_width == 0
    assert model.try_set_attack(20) is True
    assert model.phase_lengths() == (20, 0, 55, 0)


@pytest.mark.parametrize("candidate", [-0.001, 25.0001, 1000, -50])
def test_rejection_leaves_state_unchanged(candidate):
    model = make_model(attack=10.0, decay=10.0, release=10.0)
    before = model.snapshot()
    assert model.try_set_attack(candidate) is False
    assert model.try_set_release(candidate) is False
    assert model.try_set_decay_sustain(candidate, -1) == AxisAcceptance(False, False)
    assert model.snapshot() == before


def test_bounds_are_inclusive():
    model = make_model()
    assert model.try_set_attack(25)
    assert model.try_set_attack(0)
    assert model.try_set_release(25)
    assert model.try_set_decay_sustain(25, 100) == AxisAcceptance(True, True)
    assert model.params.sustain_level == 0


def test_decay_sustain_axes_are_independent():
    model = make_model(decay=5.0)

    result = model.try_set_decay_sustain(40, 20)
    assert result == AxisAcceptance(False, True)
    assert model.params.decay_width == 5.0
    assert model.params.sustain_level == pytest.approx(0.8)

    result = model.try_set_decay_sustain(12, 150)
    assert result == AxisAcceptance(True, False)
    assert model.params.decay_width == 12
    assert model.params.sustain_level == pytest.approx(0.8)


def test_handle_positions():
    model = make_model(attack=10.0, decay=5.0, sustain=0.25, release=8.0)
    assert model.handle_position(Handle.ATTACK) == (10.0, 0.0)
    assert model.handle_position("decaysustain") == (15.0, 75.0)
    # 10 + 5 + (100 - 10 - 5 - 25) + 8
    assert model.handle_position(Handle.RELEASE) == (83.0, 100)


def test_unknown_handle_fails_fast():
    model = make_model()
    with pytest.raises(InvalidHandle):
        model.handle_position("sustain")


def test_normalized_values_use_phase_budget():
    model = make_model(attack=20.0, decay=5.0, sustain=0.4, release=12.5)
    assert model.normalized() == {
        "xa": pytest.approx(0.8),
        "ya": 1.0,
        "xd": pytest.approx(0.2),
        "ys": 0.4,
        "xr": pytest.approx(0.5),
    }


def test_zero_budget_normalizes_to_zero():
    model = make_model(ratios={"attack": 0.0, "decay": 0.5, "release": 0.5})
    assert model.normalized()["xa"] == 0.0
    assert model.try_set_attack(0) is True
    assert model.try_set_attack(0.1) is False


def test_attack_level_is_reported_not_draggable():
    params = EnvelopeParams(0.0, 0.0, 0.5, 0.0, attack_level=0.9)
    model = EnvelopeModel((100, 100), params, QUARTERS)
    assert model.attack_level == 0.9
    assert not hasattr(model, "try_set_attack_level")


# ── Ratio configuration ─────────────────────────────────────────

def test_missing_ratios_default_to_quarters():
    three = PhaseRatios.from_mapping(None, RatioShape.THREE_WAY)
    four = PhaseRatios.from_mapping(None, RatioShape.FOUR_WAY)
    assert (three.attack, three.decay, three.release, three.sustain) == (0.25, 0.25, 0.25, 0.25)
    assert (four.attack, four.decay, four.release, four.sustain) == (0.25, 0.25, 0.25, 0.25)


def test_short_ratio_keys_are_accepted():
    ratios = PhaseRatios.from_mapping(
        {"xa": 0.1, "xd": 0.2, "xs": 0.3, "xr": 0.4}, RatioShape.FOUR_WAY
    )
    assert ratios.sustain == 0.3
    assert ratios.release == 0.4


def test_ratio_key_and_its_short_alias_conflict():
    with pytest.raises(ConfigurationError, match="more than once"):
        PhaseRatios.from_mapping(
            {"attack": 0.1, "xa": 0.2, "decay": 0.25, "release": 0.25},
            RatioShape.THREE_WAY,
        )


@pytest.mark.parametrize("raw,shape", [
    ({"attack": 0.25, "decay": 0.25}, RatioShape.THREE_WAY),
    ({"attack": 0.25, "decay": "0.25", "release": 0.25}, RatioShape.THREE_WAY),
    ({"attack": math.nan, "decay": 0.25, "release": 0.25}, RatioShape.THREE_WAY),
    ({"attack": math.inf, "decay": 0.25, "release": 0.25}, RatioShape.THREE_WAY),
    ({"attack": True, "decay": 0.25, "release": 0.25}, RatioShape.THREE_WAY),
    ({"attack": 0.25, "decay": 0.25, "sustain": 0.25, "release": 0.25}, RatioShape.THREE_WAY),
    ({"attack": 0.25, "decay": 0.25, "release": 0.25}, RatioShape.FOUR_WAY),
    ({"attack": 0.5, "decay": 0.5, "release": 0.5}, RatioShape.THREE_WAY),
    ({"attack": -0.1, "decay": 0.25, "release": 0.25}, RatioShape.THREE_WAY),
    ({"attack": 0.25, "decay": 0.25, "release": 0.25, "hold": 0.1}, RatioShape.THREE_WAY),
    ([0.25, 0.25, 0.25], RatioShape.THREE_WAY),
])
def test_malformed_ratios_raise(raw, shape):
    with pytest.raises(ConfigurationError):
        PhaseRatios.from_mapping(raw, shape)


@pytest.mark.parametrize("box", [(0, 100), (100, -1), (math.nan, 10), ("100", 100)])
def test_invalid_box_raises(box):
    with pytest.raises(ConfigurationError):
        EnvelopeModel(box, EnvelopeParams(0, 0, 0.5, 0), QUARTERS)


def test_non_numeric_default_raises():
    with pytest.raises(ConfigurationError):
        EnvelopeModel((100, 100), EnvelopeParams(None, 0, 0.5, 0), QUARTERS)
