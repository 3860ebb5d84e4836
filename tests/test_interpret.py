from __future__ import annotations

import dataclasses
import json

import pytest

from stress_vision.interpret import (
    CLASS_COMBINED,
    CLASS_HEALTHY,
    CLASS_NUTRIENT,
    CLASS_WATER,
    FALLBACK_NDMI,
    FALLBACK_RE_NDVI,
    SOURCE_FALLBACK,
    SOURCE_MODEL,
    damage_probability_pct,
    fallback_result,
    interpret,
)


@pytest.mark.parametrize(
    "probs, expected",
    [
        ([1.0, 0.0, 0.0, 0.0], 0),
        ([0.0, 0.0, 0.0, 1.0], 95),
        ([0.0, 1.0, 0.0, 0.0], 90),
        ([0.0, 0.0, 1.0, 0.0], 75),
        ([0.25, 0.25, 0.25, 0.25], 65),
    ],
)
def test_damage_probability(probs, expected):
    assert damage_probability_pct(probs) == expected
    assert interpret(probs, 0.6, 0.2, 0.6).damage_probability_pct == expected


def test_pre_visual_boundaries():
    assert interpret([1, 0, 0, 0], 0.45, 0.2, 0.4999).is_pre_visual is True
    assert interpret([1, 0, 0, 0], 0.45, 0.2, 0.50).is_pre_visual is False
    assert interpret([1, 0, 0, 0], 0.4499, 0.2, 0.30).is_pre_visual is False
    assert interpret([1, 0, 0, 0], 0.90, 0.2, 0.10).is_pre_visual is True


def test_predicted_class_is_argmax_with_first_index_ties():
    assert interpret([0.1, 0.2, 0.6, 0.1], 0.5, 0.1, 0.5).predicted_class == CLASS_NUTRIENT
    assert interpret([0.4, 0.4, 0.1, 0.1], 0.5, 0.1, 0.5).predicted_class == CLASS_HEALTHY
    assert interpret([0.1, 0.4, 0.1, 0.4], 0.5, 0.1, 0.5).predicted_class == CLASS_WATER


def test_interpret_echoes_indices_and_labels():
    r = interpret([0.05, 0.05, 0.1, 0.8], 0.31, -0.22, 0.07)
    assert (r.ndvi, r.ndmi, r.re_ndvi) == (0.31, -0.22, 0.07)
    assert r.predicted_class == CLASS_COMBINED
    assert r.predicted_label == "Combined Stress"
    assert r.source == SOURCE_MODEL
    assert "NDVI=0.310" in r.spectral_cause


def test_interpret_rejects_wrong_length():
    with pytest.raises(ValueError):
        interpret([0.5, 0.5, 0.0], 0.5, 0.1, 0.5)


def test_result_is_immutable():
    r = interpret([1, 0, 0, 0], 0.8, 0.3, 0.6)
    with pytest.raises(dataclasses.FrozenInstanceError):
        r.predicted_class = 2  # type: ignore[misc]


@pytest.mark.parametrize(
    "ndvi, cls, probs",
    [
        (0.1, CLASS_COMBINED, (0.15, 0.0, 0.0, 0.85)),
        (0.29, CLASS_COMBINED, (0.15, 0.0, 0.0, 0.85)),
        (0.3, CLASS_WATER, (0.35, 0.65, 0.0, 0.0)),
        (0.49, CLASS_WATER, (0.35, 0.65, 0.0, 0.0)),
        (0.5, CLASS_HEALTHY, (0.90, 0.10, 0.0, 0.0)),
        (0.85, CLASS_HEALTHY, (0.90, 0.10, 0.0, 0.0)),
    ],
)
def test_fallback_thresholds(ndvi, cls, probs):
    r = fallback_result(ndvi)
    assert r.predicted_class == cls
    assert r.probabilities == probs
    assert r.source == SOURCE_FALLBACK
    assert (r.ndmi, r.re_ndvi) == (FALLBACK_NDMI, FALLBACK_RE_NDVI)
    assert r.damage_probability_pct == damage_probability_pct(probs)


def test_fallback_healthy_damage():
    assert fallback_result(0.8).damage_probability_pct == 9


def test_water_recommendation_escalates_with_damage():
    urgent = interpret([0.0, 1.0, 0.0, 0.0], 0.5, -0.1, 0.6)
    assert urgent.damage_probability_pct >= 70
    assert urgent.recommendation.startswith("URGENT")
    mild = interpret([0.3, 0.6, 0.1, 0.0], 0.5, -0.1, 0.6)
    assert mild.damage_probability_pct < 70
    assert mild.recommendation.startswith("Schedule irrigation")


def test_summary_line():
    healthy = interpret([0.9, 0.1, 0.0, 0.0], 0.8123, 0.3, 0.6)
    assert healthy.summary_line == "Healthy — NDVI 0.81"
    pre_visual = interpret([0.1, 0.1, 0.7, 0.1], 0.6, 0.1, 0.3)
    assert pre_visual.summary_line.endswith("[PRE-VISUAL]")
    assert "Nutrient Deficiency" in pre_visual.summary_line


def test_to_dict_is_json_serialisable():
    payload = interpret([0.2, 0.3, 0.4, 0.1], 0.55, 0.05, 0.42).to_dict()
    text = json.dumps(payload)
    assert json.loads(text)["predicted_label"] == "Nutrient Deficiency"
    assert payload["is_pre_visual"] is True
