"""
Config loader & resolver

- load_yaml(path): loads YAML into dict (requires PyYAML)
- resolve_config(path, overrides_json): loads, applies optional JSON overrides,
  and fills in the engine/logging defaults

We avoid hard dependencies beyond PyYAML (very common) and standard library.
"""
from __future__ import annotations

import copy
import json
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

DEFAULT_CONFIG: Dict[str, Any] = {
    "engine": {
        "model_path": "assets/stress_vision_v2.svsn",
        "scaler_path": "assets/scaler_params.json",
        "load_async": False,
    },
    "logging": {
        "level": "INFO",
        "to_file": False,
        "to_json": False,
        "dir": "logs",
    },
}


def load_yaml(path: str | Path) -> Dict[str, Any]:
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"Config not found: {p}")
    data = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Expected YAML mapping at {p}")
    return data


def deep_merge(a: Dict, b: Dict) -> Dict:
    """Recursively merge dict b into a (returns a new dict)."""
    out = dict(a)
    for k, v in b.items():
        if isinstance(v, dict) and isinstance(out.get(k), dict):
            out[k] = deep_merge(out[k], v)
        else:
            out[k] = v
    return out


def resolve_config(path: str | Path | None, overrides_json: Optional[str] = None) -> Dict:
    """
    Load a config (or start from defaults when ``path`` is None), apply a JSON
    override patch such as ``{"engine": {"model_path": "m.svsn"}}``, and fill
    any missing engine/logging keys from DEFAULT_CONFIG.
    """
    cfg: Dict[str, Any] = load_yaml(path) if path else {}
    if overrides_json:
        cfg = deep_merge(cfg, json.loads(overrides_json))
    cfg = deep_merge(copy.deepcopy(DEFAULT_CONFIG), cfg)
    return cfg
