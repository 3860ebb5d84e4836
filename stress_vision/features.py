"""
Feature vector construction

Converts raw satellite-derived values into the 8-feature vector the model
was trained on. Two entry points:

- estimate(ndvi)        → when only NDVI is available, the remaining bands and
                          indices are derived from fixed empirical Sentinel-2
                          band correlations.
- from_full_bands(...)  → when real band values are available; values are
                          passed through untouched.

Vector layout (order must match model training order):

    [0] NDVI         (NIR - Red) / (NIR + Red)
    [1] NDMI         (NIR - SWIR) / (NIR + SWIR)        moisture
    [2] RE_NDVI      (NIR - RedEdge) / (NIR + RedEdge)  pre-visual
    [3] Red          B04 reflectance
    [4] NIR          B08 reflectance
    [5] RedEdge_1    B05 reflectance
    [6] SWIR         B11 reflectance
    [7] Canopy_Temp  normalised thermal IR (0 = 25 °C ... 1 = 45 °C)
"""
from __future__ import annotations

import math
from typing import Sequence

import numpy as np

N_FEATURES = 8
EPS = 1e-6

FEATURE_NAMES = (
    "NDVI",
    "NDMI",
    "RE-NDVI",
    "Red Band",
    "NIR Band",
    "RedEdge-1",
    "SWIR Band",
    "Canopy Temp",
)

IDX_NDVI, IDX_NDMI, IDX_RE_NDVI = 0, 1, 2
IDX_RED, IDX_NIR, IDX_RED_EDGE, IDX_SWIR, IDX_CANOPY_TEMP = 3, 4, 5, 6, 7


def _clamp01(x: float) -> float:
    return max(0.0, min(1.0, x))


def as_feature_vector(values: Sequence[float]) -> np.ndarray:
    """Return ``values`` as a float64 vector; must be 8 long and finite."""
    x = np.asarray(values, dtype=np.float64).reshape(-1)
    if x.shape[0] != N_FEATURES:
        raise ValueError(f"Expected {N_FEATURES} features, got {x.shape[0]}")
    bad = ~np.isfinite(x)
    if bad.any():
        names = ", ".join(FEATURE_NAMES[i] for i in np.flatnonzero(bad))
        raise ValueError(f"Features must be finite; got NaN/inf for: {names}")
    return x


def estimate(vegetation_index: float) -> np.ndarray:
    """
    Build the full feature vector from a single NDVI value.

    NDVI is clamped to [0, 1]. Assuming NIR + Red ≈ 0.60 (typical for crops)
    the band reflectances are reverse-engineered from NDVI; red-edge tracks NIR
    but degrades earlier, SWIR and canopy temperature rise as the crop dries.
    """
    v = float(vegetation_index)
    if not math.isfinite(v):
        raise ValueError(f"Vegetation index must be finite, got {vegetation_index!r}")
    n = _clamp01(v)

    nir = 0.30 * (1.0 + n)
    red = 0.30 * (1.0 - n)
    red_edge = nir * (0.75 + 0.10 * n)
    swir = 0.65 - 0.50 * n  # healthy=0.15, stressed=0.65

    ndmi = (nir - swir) / (nir + swir + EPS)
    re_ndvi = (nir - red_edge) / (nir + red_edge + EPS)
    canopy_temp = 0.80 - 0.65 * n

    return np.array(
        [n, ndmi, re_ndvi, red, nir, red_edge, swir, canopy_temp],
        dtype=np.float64,
    )


def from_full_bands(
    ndvi: float,
    ndmi: float,
    re_ndvi: float,
    red: float,
    nir: float,
    red_edge: float,
    swir: float,
    canopy_temp: float,
) -> np.ndarray:
    """Feature vector from fully observed Sentinel-2 bands (no re-derivation)."""
    return as_feature_vector([ndvi, ndmi, re_ndvi, red, nir, red_edge, swir, canopy_temp])
