from __future__ import annotations

import math

import numpy as np
import pytest

from stress_vision.features import (
    EPS,
    FEATURE_NAMES,
    IDX_CANOPY_TEMP,
    IDX_NDMI,
    IDX_NDVI,
    IDX_NIR,
    IDX_RE_NDVI,
    IDX_RED,
    IDX_RED_EDGE,
    IDX_SWIR,
    N_FEATURES,
    as_feature_vector,
    estimate,
    from_full_bands,
)


def test_feature_order_is_fixed():
    assert FEATURE_NAMES == (
        "NDVI", "NDMI", "RE-NDVI", "Red Band", "NIR Band", "RedEdge-1", "SWIR Band", "Canopy Temp",
    )
    assert N_FEATURES == 8


def test_estimate_reproduces_band_relationships():
    v = estimate(0.72)
    assert v.shape == (8,)
    assert v[IDX_NDVI] == 0.72
    assert v[IDX_NIR] == pytest.approx(0.30 * 1.72)
    assert v[IDX_RED] == pytest.approx(0.30 * 0.28)
    assert v[IDX_RED_EDGE] == pytest.approx(0.30 * 1.72 * (0.75 + 0.072))
    assert v[IDX_SWIR] == pytest.approx(0.65 - 0.36)
    assert v[IDX_CANOPY_TEMP] == pytest.approx(0.80 - 0.65 * 0.72)


@pytest.mark.parametrize("ndvi", [0.0, 0.13, 0.45, 0.5, 0.72, 0.99, 1.0])
def test_moisture_index_consistent_with_emitted_bands(ndvi):
    v = estimate(ndvi)
    nir, swir = v[IDX_NIR], v[IDX_SWIR]
    assert v[IDX_NDMI] == (nir - swir) / (nir + swir + EPS)


@pytest.mark.parametrize("ndvi", [0.0, 0.3, 0.72, 1.0])
def test_red_edge_index_consistent_with_emitted_bands(ndvi):
    v = estimate(ndvi)
    nir, re = v[IDX_NIR], v[IDX_RED_EDGE]
    assert v[IDX_RE_NDVI] == (nir - re) / (nir + re + EPS)


def test_estimate_clamps_to_unit_interval():
    assert np.array_equal(estimate(1.7), estimate(1.0))
    assert np.array_equal(estimate(-0.4), estimate(0.0))
    assert estimate(-0.4)[IDX_NDVI] == 0.0


def test_estimate_is_deterministic():
    assert np.array_equal(estimate(0.41), estimate(0.41))


@pytest.mark.parametrize("bad", [math.nan, math.inf, -math.inf])
def test_estimate_rejects_non_finite(bad):
    with pytest.raises(ValueError):
        estimate(bad)


def test_full_bands_pass_through_unchanged():
    values = (0.61, -0.12, 0.33, 0.081, 0.402, 0.377, 0.51, 0.74)
    v = from_full_bands(*values)
    assert v.tolist() == list(values)


def test_feature_vector_length_is_enforced():
    with pytest.raises(ValueError):
        as_feature_vector([0.1] * 7)
    with pytest.raises(ValueError):
        as_feature_vector([0.1] * 9)


@pytest.mark.parametrize("bad", [math.nan, math.inf])
def test_full_bands_reject_non_finite(bad):
    with pytest.raises(ValueError, match="SWIR Band"):
        from_full_bands(0.61, -0.12, 0.33, 0.081, 0.402, 0.377, bad, 0.74)
