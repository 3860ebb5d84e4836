# stress_vision/batch.py
# Table scoring for field surveys: one row per zone, scored through the engine.
from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List

import pandas as pd

from .engine import StressVisionEngine
from .interpret import PredictionResult
from .utils.logging_utils import get_logger

# Column names for a full band reading, in feature-vector order.
BAND_COLUMNS = ["ndvi", "ndmi", "re_ndvi", "red", "nir", "red_edge", "swir", "canopy_temp"]


def _row_result(engine: StressVisionEngine, row: pd.Series, has_bands: bool) -> PredictionResult:
    if has_bands and row[BAND_COLUMNS].notna().all():
        return engine.predict([float(row[c]) for c in BAND_COLUMNS])
    return engine.predict_ndvi(float(row["ndvi"]))


def _flatten(result: PredictionResult) -> Dict[str, Any]:
    return {
        "predicted_class": result.predicted_class,
        "predicted_label": result.predicted_label,
        "damage_probability_pct": result.damage_probability_pct,
        "is_pre_visual": result.is_pre_visual,
        "prob_healthy": result.prob_healthy,
        "prob_water_stress": result.prob_water_stress,
        "prob_nutrient": result.prob_nutrient,
        "prob_combined": result.prob_combined,
        "source": result.source,
    }


def score_frame(engine: StressVisionEngine, df: pd.DataFrame) -> pd.DataFrame:
    """Score every row of ``df``.

    Rows with all eight band columns present use the full-band path; rows with
    only ``ndvi`` (or with gaps in the band columns) use NDVI estimation.

    Returns a copy of ``df`` with the prediction columns appended.
    """
    if "ndvi" not in df.columns:
        raise ValueError("Input table needs at least an 'ndvi' column")
    if df["ndvi"].isna().any():
        raise ValueError("'ndvi' column contains missing values")

    has_bands = all(c in df.columns for c in BAND_COLUMNS)
    rows: List[Dict[str, Any]] = [_flatten(_row_result(engine, row, has_bands)) for _, row in df.iterrows()]
    scored = pd.DataFrame(rows, index=df.index)
    return pd.concat([df.copy(), scored], axis=1)


def score_csv(engine: StressVisionEngine, in_path: str | Path, out_path: str | Path) -> Dict[str, Any]:
    """Score a CSV file and write the result. Returns a small artifact dict."""
    log = get_logger("svn.batch")
    df = pd.read_csv(in_path)
    out = score_frame(engine, df)

    out_p = Path(out_path)
    out_p.parent.mkdir(parents=True, exist_ok=True)
    out.to_csv(out_p, index=False)

    counts = out["predicted_label"].value_counts().to_dict()
    n_pre_visual = int(out["is_pre_visual"].sum())
    log.info(f"Batch: scored {len(out)} rows → {out_p} (pre-visual={n_pre_visual})")
    return {
        "rows": int(len(out)),
        "output": str(out_p),
        "class_counts": {str(k): int(v) for k, v in counts.items()},
        "pre_visual": n_pre_visual,
        "engine_loaded": engine.is_loaded,
    }
