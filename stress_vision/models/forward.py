"""
Dense forward pass.

    z = W @ x + b      per layer (W is [out, in])
    ReLU               on every layer except the last
    softmax            on the last layer, max-subtracted for stability

Accumulation is float64 regardless of the float32 storage of the weights, and
there is no randomness anywhere, so identical inputs give bit-identical outputs.
"""
from __future__ import annotations

import numpy as np

from ..features import as_feature_vector
from .dense import Model


def relu(z: np.ndarray) -> np.ndarray:
    return np.maximum(z, 0.0)


def softmax(z: np.ndarray, axis: int = -1) -> np.ndarray:
    z = np.asarray(z, dtype=np.float64)
    e = np.exp(z - np.max(z, axis=axis, keepdims=True))
    return e / np.sum(e, axis=axis, keepdims=True)


def _logits(model: Model, X: np.ndarray) -> np.ndarray:
    # X: [N, in]; one matmul per layer keeps batch rows independent.
    a = X
    last = model.layer_count - 1
    for i, layer in enumerate(model.layers):
        z = a @ layer.weights.astype(np.float64).T + layer.bias.astype(np.float64)
        a = z if i == last else relu(z)
    return a


def infer(model: Model, x) -> np.ndarray:
    """Class probabilities (length 4) for one normalised feature vector."""
    X = as_feature_vector(x).reshape(1, -1)
    return softmax(_logits(model, X))[0]


def infer_batch(model: Model, X) -> np.ndarray:
    """Row-wise probabilities for an [N, 8] matrix of normalised features."""
    X = np.asarray(X, dtype=np.float64)
    if X.ndim != 2 or X.shape[1] != model.layers[0].in_dim:
        raise ValueError(f"Expected [N, {model.layers[0].in_dim}] features, got shape {X.shape}")
    return softmax(_logits(model, X), axis=1)
