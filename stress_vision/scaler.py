"""
StandardScaler-style feature normalisation.

Parameters are exported from scikit-learn's StandardScaler (``mean_`` and
``scale_``) as JSON or YAML and loaded once at engine start.
"""
from __future__ import annotations

import json
import warnings
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Sequence

import numpy as np
import yaml

from .errors import DegradedNormalization
from .features import N_FEATURES, as_feature_vector

# |scale| below this is treated as zero
SCALE_EPS = 1e-12


def _as_params(values: Sequence[float], name: str) -> np.ndarray:
    arr = np.array(values, dtype=np.float64, copy=True).reshape(-1)
    if arr.shape[0] != N_FEATURES:
        raise ValueError(f"Scaler '{name}' must have {N_FEATURES} entries, got {arr.shape[0]}")
    arr.setflags(write=False)
    return arr


@dataclass(frozen=True, eq=False)
class Scaler:
    mean: np.ndarray
    scale: np.ndarray

    @classmethod
    def from_params(cls, mean: Sequence[float], scale: Sequence[float]) -> "Scaler":
        m = _as_params(mean, "mean")
        if not np.all(np.isfinite(m)):
            raise ValueError("Scaler 'mean' must be finite")
        return cls(mean=m, scale=_as_params(scale, "scale"))

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Scaler":
        mean = d.get("mean_", d.get("mean"))
        scale = d.get("scale_", d.get("scale"))
        if mean is None or scale is None:
            raise ValueError("Scaler params need 'mean_' and 'scale_' arrays")
        return cls.from_params(mean, scale)

    def to_dict(self) -> Dict[str, Any]:
        return {"mean_": self.mean.tolist(), "scale_": self.scale.tolist()}

    def normalize(self, x: Sequence[float]) -> np.ndarray:
        """
        (x - mean) / scale, elementwise. Indices whose scale is zero, near zero
        or non-finite are only centred, never divided.
        """
        centred = as_feature_vector(x) - self.mean
        usable = np.isfinite(self.scale) & (np.abs(self.scale) > SCALE_EPS)
        safe_scale = np.where(usable, self.scale, 1.0)
        return centred / safe_scale


def normalize(x: Sequence[float], scaler: Optional[Scaler]) -> np.ndarray:
    """Normalise with ``scaler``; without one, warn and pass the features through."""
    if scaler is None:
        warnings.warn(
            "No scaler parameters loaded; features are not normalised (reduced accuracy).",
            DegradedNormalization,
            stacklevel=2,
        )
        return as_feature_vector(x).copy()
    return scaler.normalize(x)


def load_scaler(path: str | Path) -> Scaler:
    """Load scaler params from a .json or .yaml/.yml file."""
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"Scaler params not found: {p}")
    text = p.read_text(encoding="utf-8")
    try:
        if p.suffix.lower() in (".yml", ".yaml"):
            data = yaml.safe_load(text)
        else:
            data = json.loads(text)
    except yaml.YAMLError as e:
        raise ValueError(f"Unparseable scaler params in {p}: {e}") from e
    if not isinstance(data, dict):
        raise ValueError(f"Expected a mapping with 'mean_' and 'scale_' in {p}")
    try:
        return Scaler.from_dict(data)
    except TypeError as e:
        raise ValueError(f"Scaler params in {p} are not numeric arrays: {e}") from e
