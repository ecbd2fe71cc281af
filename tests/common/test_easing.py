from __future__ import annotations

import pytest

from common.easing import (
    ANIMATION_PRESETS,
    C1,
    animate_parameter,
    bounce,
    easings,
    get_easing,
    linear,
)


def test_check_values() -> None:
    assert linear(0.0) == 0.0
    assert linear(1.0) == 1.0
    assert get_easing("easeInOutQuad")(0.5) == pytest.approx(0.5)
    assert bounce(1.0) == pytest.approx(1.0)


@pytest.mark.parametrize("name", easings.list_all())
def test_every_easing_maps_endpoints(name: str) -> None:
    fn = get_easing(name)
    assert fn(0.0) == pytest.approx(0.0, abs=1e-12)
    assert fn(1.0) == pytest.approx(1.0, abs=1e-12)


def test_name_spellings_resolve_to_same_function() -> None:
    fn = get_easing("ease_in_out_cubic")
    assert get_easing("easeInOutCubic") is fn
    assert get_easing("ease-in-out-cubic") is fn


def test_callable_passes_through_and_unknown_raises() -> None:
    def custom(t: float) -> float:
        return t

    assert get_easing(custom) is custom
    with pytest.raises(KeyError):
        get_easing("wobble")


def test_back_overshoots() -> None:
    ease_in_back = get_easing("easeInBack")
    assert ease_in_back(0.3) < 0.0
    assert get_easing("easeOutBack")(0.7) > 1.0
    assert C1 == pytest.approx(1.70158)


def test_bounce_segments_are_continuous() -> None:
    for edge in (1 / 2.75, 2 / 2.75, 2.5 / 2.75):
        assert bounce(edge - 1e-9) == pytest.approx(bounce(edge), abs=1e-6)


def test_animate_parameter_and_presets() -> None:
    assert animate_parameter(10.0, 20.0, 0.5) == pytest.approx(15.0)
    assert animate_parameter(0.0, 100.0, 0.5, "easeInQuad") == pytest.approx(25.0)
    for preset in ANIMATION_PRESETS.values():
        assert easings.is_registered(str(preset["easing"]))
        assert float(preset["duration"]) > 0  # type: ignore[arg-type]
