"""
Stress Vision (SVN) — On-device crop stress inference engine

This package turns a satellite-derived spectral reading into an actionable
crop stress assessment:
1) features  → 8-feature vector (estimated from NDVI, or full Sentinel-2 bands)
2) scaler    → StandardScaler-style normalisation
3) models    → SVSN binary model loader + dense forward pass (softmax output)
4) interpret → stress class, damage probability, pre-visual early warning

Design goals
------------
- Deterministic: no randomness anywhere in the inference path.
- Fail-soft: a missing or corrupt model degrades to a rule-based fallback.
- Config-driven: model/scaler paths and logging come from YAML in /configs.
- CLI-first: the Typer CLI plays the role of the sensing + presentation layers.

License: MIT
"""
__version__ = "2.0.0"

__all__ = [
    "cli",
    "engine",
    "errors",
    "features",
    "interpret",
    "models",
    "rules",
    "scaler",
    "batch",
]
