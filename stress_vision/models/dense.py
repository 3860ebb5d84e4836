# stress_vision/models/dense.py
# ======================================================================================
# Stress Vision (SVN)
# Dense network containers: immutable layer + model value types
# --------------------------------------------------------------------------------------
# A Model is an ordered tuple of DenseLayer. Weight matrices are stored [out, in]
# (row o holds the weights feeding output o) and are frozen (read-only numpy
# arrays) so a loaded Model can be shared across threads without locking.
# ======================================================================================

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Dict, List, Tuple

import numpy as np

N_INPUTS = 8
N_CLASSES = 4


class Activation(IntEnum):
    RELU = 0


def _frozen(a: np.ndarray) -> np.ndarray:
    a = np.array(a, dtype=np.float32, copy=True)
    a.setflags(write=False)
    return a


@dataclass(frozen=True, eq=False)
class DenseLayer:
    weights: np.ndarray  # [out_dim, in_dim], float32
    bias: np.ndarray     # [out_dim], float32
    activation: Activation = Activation.RELU

    def __post_init__(self) -> None:
        w = _frozen(self.weights)
        b = _frozen(self.bias).reshape(-1)
        if w.ndim != 2:
            raise ValueError(f"weights must be 2-D [out, in], got shape {w.shape}")
        if b.shape[0] != w.shape[0]:
            raise ValueError(f"bias length {b.shape[0]} != out_dim {w.shape[0]}")
        object.__setattr__(self, "weights", w)
        object.__setattr__(self, "bias", b)
        object.__setattr__(self, "activation", Activation(self.activation))

    @property
    def in_dim(self) -> int:
        return int(self.weights.shape[1])

    @property
    def out_dim(self) -> int:
        return int(self.weights.shape[0])

    @property
    def n_params(self) -> int:
        return self.weights.size + self.bias.size


@dataclass(frozen=True, eq=False)
class Model:
    layers: Tuple[DenseLayer, ...]
    version: int = 2

    def __post_init__(self) -> None:
        object.__setattr__(self, "layers", tuple(self.layers))

    @property
    def layer_count(self) -> int:
        return len(self.layers)

    @property
    def n_params(self) -> int:
        return sum(layer.n_params for layer in self.layers)

    @property
    def topology(self) -> List[int]:
        """[in_0, out_0, out_1, ...], e.g. [8, 64, 32, 16, 4]."""
        if not self.layers:
            return []
        return [self.layers[0].in_dim] + [layer.out_dim for layer in self.layers]

    def numerically_equal(self, other: "Model") -> bool:
        """Numerical equality (same topology, activations, weights and biases)."""
        if self.version != other.version or self.layer_count != other.layer_count:
            return False
        for a, b in zip(self.layers, other.layers):
            if a.activation != b.activation or a.weights.shape != b.weights.shape:
                return False
            if not (np.array_equal(a.weights, b.weights) and np.array_equal(a.bias, b.bias)):
                return False
        return True


def describe_model(model: Model) -> Dict[str, Any]:
    """JSON-able summary used by the CLI and load logs."""
    return {
        "format_version": model.version,
        "layer_count": model.layer_count,
        "topology": model.topology,
        "n_params": model.n_params,
        "layers": [
            {
                "index": i,
                "in_dim": layer.in_dim,
                "out_dim": layer.out_dim,
                "activation": layer.activation.name.lower(),
            }
            for i, layer in enumerate(model.layers)
        ],
    }
