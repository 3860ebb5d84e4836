"""
Shared pytest fixtures for SVN tests.

Builds SVSN byte streams (well-formed and deliberately broken), writes model /
scaler files into tmp_path, and provides a minimal engine config pointing at
them.
"""
from __future__ import annotations

import json
import logging
import struct
from pathlib import Path
from typing import Callable, Dict, List, Sequence, Tuple

import numpy as np
import pytest

from stress_vision.models import DenseLayer, Model, dump_model
from stress_vision.utils.config_loader import load_yaml

# (in_dim, out_dim, activation_code, flat weights, bias)
LayerSpec = Tuple[int, int, int, Sequence[float], Sequence[float]]


def _svsn_bytes(
    layers: List[LayerSpec],
    magic: bytes = b"SVSN",
    version: int = 2,
    layer_count: int | None = None,
    trailing: bytes = b"",
) -> bytes:
    out = [magic, struct.pack("<i", version), struct.pack("<i", len(layers) if layer_count is None else layer_count)]
    for in_dim, out_dim, act, w, b in layers:
        out.append(struct.pack("<iii", in_dim, out_dim, act))
        out.append(struct.pack(f"<{len(w)}f", *w))
        out.append(struct.pack(f"<{len(b)}f", *b))
    return b"".join(out) + trailing


def _random_model(dims: Sequence[int] = (8, 64, 32, 16, 4), seed: int = 7) -> Model:
    rng = np.random.default_rng(seed)
    layers = []
    for d_in, d_out in zip(dims[:-1], dims[1:]):
        w = rng.normal(0.0, np.sqrt(2.0 / d_in), size=(d_out, d_in))
        b = rng.normal(0.0, 0.05, size=d_out)
        layers.append(DenseLayer(weights=w, bias=b))
    return Model(layers=tuple(layers), version=2)


def _identity_model() -> Model:
    """Single 8→4 layer that copies features 0..3 straight into the logits."""
    w = np.zeros((4, 8), dtype=np.float32)
    w[np.arange(4), np.arange(4)] = 1.0
    return Model(layers=(DenseLayer(weights=w, bias=np.zeros(4)),), version=1)


@pytest.fixture(autouse=True)
def _reset_root_logging():
    """CLI commands re-point root handlers at CliRunner streams; restore afterwards."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for h in list(root.handlers):
        if h not in handlers:
            root.removeHandler(h)
    for h in handlers:
        if h not in root.handlers:
            root.addHandler(h)
    root.setLevel(level)


@pytest.fixture
def make_svsn() -> Callable[..., bytes]:
    """Factory for raw SVSN byte streams (lets tests corrupt any field)."""
    return _svsn_bytes


@pytest.fixture
def random_model() -> Model:
    """Deterministic 8→64→32→16→4 model with He-style random weights."""
    return _random_model()


@pytest.fixture
def identity_model() -> Model:
    return _identity_model()


@pytest.fixture
def model_bytes(random_model: Model) -> bytes:
    return dump_model(random_model)


@pytest.fixture
def model_file(tmp_path: Path, model_bytes: bytes) -> Path:
    p = tmp_path / "assets" / "stress_vision_v2.svsn"
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_bytes(model_bytes)
    return p


@pytest.fixture
def identity_model_file(tmp_path: Path, identity_model: Model) -> Path:
    p = tmp_path / "assets" / "identity.svsn"
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_bytes(dump_model(identity_model))
    return p


@pytest.fixture
def scaler_params() -> Dict[str, List[float]]:
    return {
        "mean_": [0.55, 0.10, 0.12, 0.14, 0.46, 0.36, 0.38, 0.45],
        "scale_": [0.20, 0.25, 0.03, 0.06, 0.06, 0.05, 0.10, 0.13],
    }


@pytest.fixture
def scaler_file(tmp_path: Path, scaler_params) -> Path:
    p = tmp_path / "assets" / "scaler_params.json"
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(json.dumps(scaler_params), encoding="utf-8")
    return p


_MIN_ENGINE_YAML = """\
engine:
  model_path: "{MODEL}"
  scaler_path: "{SCALER}"
  load_async: false

logging:
  level: "CRITICAL"
  to_file: false
"""


@pytest.fixture
def cfg_path(tmp_path: Path, model_file: Path, scaler_file: Path) -> Path:
    """Writes a minimal engine.yaml into tmp_path/configs/ and returns its path."""
    cfg_dir = tmp_path / "configs"
    cfg_dir.mkdir(parents=True, exist_ok=True)
    text = _MIN_ENGINE_YAML.replace("{MODEL}", model_file.as_posix()).replace("{SCALER}", scaler_file.as_posix())
    p = cfg_dir / "engine.yaml"
    p.write_text(text, encoding="utf-8")
    return p


@pytest.fixture
def cfg(cfg_path: Path) -> Dict:
    return load_yaml(cfg_path)
