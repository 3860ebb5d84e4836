from __future__ import annotations

import pytest

from stress_vision.rules import (
    StressLevel,
    classify,
    format_ndvi,
    format_temperature,
    interpret_ndvi,
    interpret_temperature,
)


@pytest.mark.parametrize(
    "ndvi, temp, level",
    [
        (0.3, 36.0, StressLevel.SEVERE_STRESS),
        (0.3, 35.0, StressLevel.MODERATE_STRESS),  # needs strictly hotter than 35
        (0.3, 20.0, StressLevel.MODERATE_STRESS),
        (0.5, 42.0, StressLevel.MODERATE_STRESS),
        (0.6, 42.0, StressLevel.HEALTHY),
        (0.85, 22.0, StressLevel.HEALTHY),
    ],
)
def test_classify(ndvi, temp, level):
    assert classify(ndvi, temp) is level


def test_levels_carry_text():
    assert StressLevel.SEVERE_STRESS.label == "Severe Stress"
    assert "Immediate" in StressLevel.SEVERE_STRESS.description


def test_interpretations():
    assert interpret_ndvi(0.1) == "Bare soil or dead vegetation"
    assert interpret_ndvi(0.7) == "Dense healthy vegetation"
    assert interpret_ndvi(0.95).startswith("Very dense")
    assert interpret_temperature(24.9).startswith("Cool")
    assert interpret_temperature(38.0).startswith("Hot")
    assert interpret_temperature(41.0) == "Critical heat stress"


def test_formatting():
    assert format_ndvi(0.7234) == "0.72"
    assert format_temperature(31.26) == "31.3°C"
