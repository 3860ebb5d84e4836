# stress_vision/models/loader.py
# ======================================================================================
# Stress Vision (SVN)
# SVSN binary model format: reader (and a byte-exact writer for fixtures/tools)
# --------------------------------------------------------------------------------------
# Layout (little-endian, sequential, no padding)
# ----------------------------------------------
#   char[4]  magic            "SVSN"
#   int32    format version   (read, not checked)
#   int32    layer count L
#   L x {
#     int32    in_dim  I
#     int32    out_dim O
#     int32    activation code (0 = ReLU)
#     float32  weights[O][I]   row-major, row o feeds output o
#     float32  bias[O]
#   }
#
# Integrity rules
# ---------------
#   • bad magic                         → BadMagic
#   • L <= 0, I/O <= 0, broken chain,
#     first in_dim != 8, last out != 4,
#     NaN/inf weights or bias            → StructuralMismatch
#   • unknown activation code           → UnknownActivation
#   • short read or trailing bytes      → TruncatedOrOverlongStream
#
# Nothing is returned until the whole stream has been validated, so a failed load
# never yields a partially initialised Model.
# ======================================================================================

from __future__ import annotations

import struct
from pathlib import Path
from typing import BinaryIO, List, Union

import numpy as np

from ..errors import (
    BadMagic,
    StructuralMismatch,
    TruncatedOrOverlongStream,
    UnknownActivation,
)
from ..utils.logging_utils import get_logger
from .dense import N_CLASSES, N_INPUTS, Activation, DenseLayer, Model

MAGIC = b"SVSN"
_INT32 = struct.Struct("<i")
_LAYER_HEADER = struct.Struct("<iii")
_F32 = np.dtype("<f4")

log = get_logger("svn.loader")


class _Cursor:
    """Bounds-checked sequential reader over an in-memory buffer."""

    def __init__(self, data: bytes) -> None:
        self._buf = memoryview(data)
        self._pos = 0

    @property
    def remaining(self) -> int:
        return len(self._buf) - self._pos

    def take(self, n: int, what: str) -> memoryview:
        if n > self.remaining:
            raise TruncatedOrOverlongStream(
                f"Stream truncated reading {what}: need {n} bytes at offset {self._pos}, "
                f"{self.remaining} left"
            )
        chunk = self._buf[self._pos : self._pos + n]
        self._pos += n
        return chunk

    def int32(self, what: str) -> int:
        return _INT32.unpack(self.take(_INT32.size, what))[0]

    def floats(self, count: int, what: str) -> np.ndarray:
        raw = self.take(count * _F32.itemsize, what)
        return np.frombuffer(raw, dtype=_F32, count=count).astype(np.float32)


def _read_layer(cur: _Cursor, index: int, expected_in: int) -> DenseLayer:
    in_dim, out_dim, act_code = _LAYER_HEADER.unpack(cur.take(_LAYER_HEADER.size, f"layer {index} header"))

    if in_dim <= 0 or out_dim <= 0:
        raise StructuralMismatch(f"Layer {index}: non-positive dims ({in_dim} -> {out_dim})")
    if in_dim != expected_in:
        raise StructuralMismatch(
            f"Layer {index}: in_dim {in_dim} does not match expected {expected_in}"
        )
    try:
        activation = Activation(act_code)
    except ValueError:
        raise UnknownActivation(index, act_code) from None

    weights = cur.floats(out_dim * in_dim, f"layer {index} weights").reshape(out_dim, in_dim)
    bias = cur.floats(out_dim, f"layer {index} bias")
    if not (np.isfinite(weights).all() and np.isfinite(bias).all()):
        raise StructuralMismatch(f"Layer {index}: weights or bias contain NaN/inf")
    return DenseLayer(weights=weights, bias=bias, activation=activation)


def load_model(source: Union[bytes, bytearray, memoryview, BinaryIO]) -> Model:
    """
    Parse an SVSN model from bytes or a binary file object.

    The stream is read in full and not retained. Raises a MalformedModel
    subclass on any integrity violation.
    """
    data = bytes(source) if isinstance(source, (bytes, bytearray, memoryview)) else source.read()
    cur = _Cursor(data)

    magic = bytes(cur.take(len(MAGIC), "magic"))
    if magic != MAGIC:
        raise BadMagic(f"Bad magic {magic!r}, expected {MAGIC!r}")

    version = cur.int32("format version")
    n_layers = cur.int32("layer count")
    if n_layers <= 0:
        raise StructuralMismatch(f"Layer count must be positive, got {n_layers}")

    layers: List[DenseLayer] = []
    expected_in = N_INPUTS
    for i in range(n_layers):
        layer = _read_layer(cur, i, expected_in)
        layers.append(layer)
        expected_in = layer.out_dim

    if expected_in != N_CLASSES:
        raise StructuralMismatch(f"Final layer emits {expected_in} outputs, expected {N_CLASSES}")
    if cur.remaining:
        raise TruncatedOrOverlongStream(f"{cur.remaining} trailing bytes after last layer")

    model = Model(layers=tuple(layers), version=version)
    log.debug("Parsed SVSN v%d: topology=%s params=%d", version, model.topology, model.n_params)
    return model


def load_model_file(path: str | Path) -> Model:
    with Path(path).open("rb") as f:
        return load_model(f)


def dump_model(model: Model) -> bytes:
    """Serialise ``model`` to the SVSN layout; load_model(dump_model(m)) reproduces m."""
    parts = [MAGIC, _INT32.pack(model.version), _INT32.pack(model.layer_count)]
    for layer in model.layers:
        parts.append(_LAYER_HEADER.pack(layer.in_dim, layer.out_dim, int(layer.activation)))
        parts.append(np.ascontiguousarray(layer.weights, dtype=_F32).tobytes())
        parts.append(np.ascontiguousarray(layer.bias, dtype=_F32).tobytes())
    return b"".join(parts)
