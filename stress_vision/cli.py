# FILE: stress_vision/cli.py
# =============================================================================
# Stress Vision (SVN) — Typer CLI
#
# Stands in for the sensing + presentation layers around the engine: it feeds
# a measurement in, prints the structured prediction out.
#
# Commands
# --------
#   predict          NDVI only → estimated features → prediction (JSON)
#   predict-bands    full Sentinel-2 band reading → prediction (JSON)
#   batch            CSV of readings → scored CSV
#   rules            legacy NDVI + canopy temperature classifier
#   inspect-model    validate an SVSN file and print its topology
#   selftest         load engine, run a reference prediction, write a report
#   effective-config resolved config after overrides
#   version, env
#
# Usage examples
# --------------
#   python -m stress_vision predict -c configs/engine.yaml --ndvi 0.72
#   python -m stress_vision batch -c configs/engine.yaml --input zones.csv --output scored.csv
#   python -m stress_vision inspect-model assets/stress_vision_v2.svsn
# =============================================================================

from __future__ import annotations

import json
import platform
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

import numpy as np
import typer
import yaml

from . import __version__
from .batch import score_csv
from .engine import StressVisionEngine
from .errors import MalformedModel
from .interpret import PredictionResult
from .models import describe_model, load_model_file
from .rules import classify, format_ndvi, format_temperature, interpret_ndvi, interpret_temperature
from .utils.config_loader import resolve_config
from .utils.logging_utils import get_logger, init_logging

app = typer.Typer(add_completion=False, help="Stress Vision (SVN) — crop stress inference CLI")

# Reference input for selftest: healthy-looking canopy
_SELFTEST_NDVI = 0.72

# =============================================================================
# Helpers
# =============================================================================


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def _write_json(path: Path, obj: Any) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(obj, indent=2, sort_keys=False), encoding="utf-8")


def _env_snapshot_dict() -> Dict[str, Any]:
    return {
        "python": sys.version.replace("\n", " "),
        "platform": platform.platform(),
        "executable": sys.executable,
        "numpy": np.__version__,
        "svn": __version__,
    }


def _bootstrap(config: Optional[str], overrides: Optional[str], log_level: Optional[str]) -> Dict[str, Any]:
    """Resolve config, apply --log-level, and initialise logging."""
    cfg = resolve_config(config, overrides_json=overrides)
    if log_level:
        cfg["logging"]["level"] = log_level
    init_logging(cfg)
    return cfg


def _start_engine(cfg: Dict[str, Any]) -> StressVisionEngine:
    engine = StressVisionEngine.from_config(cfg)
    if cfg["engine"].get("load_async", False):
        engine.load_async().result()
    else:
        engine.load()
    return engine


def _emit(result: PredictionResult, engine: StressVisionEngine, summary: bool) -> None:
    if summary:
        typer.echo(result.summary_line)
        typer.echo(result.spectral_cause)
        typer.echo(result.recommendation)
        return
    payload = result.to_dict()
    payload["engine_loaded"] = engine.is_loaded
    typer.echo(json.dumps(payload, indent=2, ensure_ascii=False))


# =============================================================================
# Core CLI Commands
# =============================================================================


@app.command("version")
def cli_version():
    typer.echo(json.dumps({"svn_version": __version__, "timestamp_utc": _utc_now_iso()}, indent=2))


@app.command("env")
def cli_env():
    typer.echo(json.dumps(_env_snapshot_dict(), indent=2))


@app.command("effective-config")
def cli_effective_config(
    config: Optional[str] = typer.Option(None, "--config", "-c", help="Path to YAML config."),
    overrides: Optional[str] = typer.Option(None, "--override", "-o", help="JSON string of overrides."),
    out: Optional[str] = typer.Option(None, "--out", help="Write resolved config to this path (json|yaml)."),
):
    """
    Render the fully-resolved config (after JSON overrides and defaults).
    """
    cfg = resolve_config(config, overrides_json=overrides)
    if out:
        outp = Path(out)
        outp.parent.mkdir(parents=True, exist_ok=True)
        if outp.suffix.lower() in (".yml", ".yaml"):
            outp.write_text(yaml.safe_dump(cfg, sort_keys=False), encoding="utf-8")
        else:
            _write_json(outp, cfg)
        typer.echo(f"Wrote resolved config → {outp.as_posix()}")
    else:
        typer.echo(json.dumps(cfg, indent=2))


@app.command("inspect-model")
def cli_inspect_model(
    path: str = typer.Argument(..., help="Path to an SVSN model file."),
):
    """
    Validate an SVSN model file and print its topology.
    """
    try:
        model = load_model_file(path)
    except FileNotFoundError:
        typer.secho(f"Model file not found: {path}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=2)
    except MalformedModel as e:
        typer.secho(f"{type(e).__name__}: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=2)
    typer.echo(json.dumps(describe_model(model), indent=2))


# ------------------------------- PREDICTION -----------------------------------


@app.command("predict")
def cli_predict(
    ndvi: float = typer.Option(..., "--ndvi", help="NDVI value (0.0 – 1.0)."),
    config: Optional[str] = typer.Option(None, "--config", "-c", help="Path to engine config YAML."),
    overrides: Optional[str] = typer.Option(None, "--override", "-o", help="JSON string of overrides."),
    summary: bool = typer.Option(False, "--summary", help="Print human-readable text instead of JSON."),
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Override logging level (e.g. INFO, DEBUG)."),
):
    """
    Predict crop stress from NDVI alone (remaining features are estimated).
    """
    cfg = _bootstrap(config, overrides, log_level)
    engine = _start_engine(cfg)
    _emit(engine.predict_ndvi(ndvi), engine, summary)


@app.command("predict-bands")
def cli_predict_bands(
    ndvi: float = typer.Option(..., "--ndvi", help="(B08-B04)/(B08+B04)"),
    ndmi: float = typer.Option(..., "--ndmi", help="(B08-B11)/(B08+B11)"),
    re_ndvi: float = typer.Option(..., "--re-ndvi", help="(B08-B05)/(B08+B05)"),
    red: float = typer.Option(..., "--red", help="B04 reflectance"),
    nir: float = typer.Option(..., "--nir", help="B08 reflectance"),
    red_edge: float = typer.Option(..., "--red-edge", help="B05 reflectance"),
    swir: float = typer.Option(..., "--swir", help="B11 reflectance"),
    canopy_temp: float = typer.Option(..., "--canopy-temp", help="Normalised thermal (0=cool, 1=hot)"),
    config: Optional[str] = typer.Option(None, "--config", "-c", help="Path to engine config YAML."),
    overrides: Optional[str] = typer.Option(None, "--override", "-o", help="JSON string of overrides."),
    summary: bool = typer.Option(False, "--summary", help="Print human-readable text instead of JSON."),
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Override logging level (e.g. INFO, DEBUG)."),
):
    """
    Predict crop stress from a full Sentinel-2 band reading.
    """
    cfg = _bootstrap(config, overrides, log_level)
    engine = _start_engine(cfg)
    result = engine.predict_bands(ndvi, ndmi, re_ndvi, red, nir, red_edge, swir, canopy_temp)
    _emit(result, engine, summary)


@app.command("batch")
def cli_batch(
    input_path: str = typer.Option(..., "--input", "-i", help="CSV with an 'ndvi' column (optionally all band columns)."),
    output: str = typer.Option(..., "--output", help="Where to write the scored CSV."),
    config: Optional[str] = typer.Option(None, "--config", "-c", help="Path to engine config YAML."),
    overrides: Optional[str] = typer.Option(None, "--override", "-o", help="JSON string of overrides."),
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Override logging level (e.g. INFO, DEBUG)."),
):
    """
    Score a CSV of zone readings.
    """
    cfg = _bootstrap(config, overrides, log_level)
    engine = _start_engine(cfg)
    try:
        art = score_csv(engine, input_path, output)
    except (FileNotFoundError, ValueError) as e:
        typer.secho(str(e), fg=typer.colors.RED, err=True)
        raise typer.Exit(code=2)
    typer.echo(json.dumps(art, indent=2))


@app.command("rules")
def cli_rules(
    ndvi: float = typer.Option(..., "--ndvi", help="NDVI value."),
    temperature: float = typer.Option(..., "--temperature", "-t", help="Canopy temperature in °C."),
):
    """
    Legacy rule-based classification (NDVI + canopy temperature).
    """
    level = classify(ndvi, temperature)
    typer.echo(json.dumps({
        "level": level.name,
        "label": level.label,
        "description": level.description,
        "ndvi": format_ndvi(ndvi),
        "ndvi_interpretation": interpret_ndvi(ndvi),
        "temperature": format_temperature(temperature),
        "temperature_interpretation": interpret_temperature(temperature),
    }, indent=2, ensure_ascii=False))


@app.command("selftest")
def cli_selftest(
    config: Optional[str] = typer.Option(None, "--config", "-c", help="Path to engine config YAML."),
    out_dir: str = typer.Option("outputs", "--out-dir", help="Directory for selftest_report.json."),
    allow_fallback: bool = typer.Option(False, "--allow-fallback", help="Pass even if the model is unavailable."),
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Override logging level (e.g. INFO, DEBUG)."),
):
    """
    Load the engine, run a reference prediction and write outputs/selftest_report.json.
    """
    cfg = _bootstrap(config, None, log_level)
    log = get_logger("svn.cli")
    engine = _start_engine(cfg)
    result = engine.predict_ndvi(_SELFTEST_NDVI)

    probs = np.asarray(result.probabilities)
    probs_ok = bool(np.all(probs >= 0.0) and abs(float(probs.sum()) - 1.0) < 1e-5)
    problems = []
    if not probs_ok:
        problems.append("probabilities do not form a distribution")
    if not engine.is_loaded and not allow_fallback:
        problems.append(f"model unavailable ({engine.load_error})")

    report = {
        "timestamp_utc": _utc_now_iso(),
        "status": "ok" if not problems else "failed",
        "problems": problems,
        "engine_loaded": engine.is_loaded,
        "normalization_degraded": engine.normalization_degraded,
        "model": describe_model(engine.model) if engine.model is not None else None,
        "reference_ndvi": _SELFTEST_NDVI,
        "reference_result": result.to_dict(),
        "environment": _env_snapshot_dict(),
    }
    report_path = Path(out_dir) / "selftest_report.json"
    _write_json(report_path, report)
    if problems:
        log.error("Selftest failed: %s", problems)
        raise typer.Exit(code=2)
    log.info("Selftest passed. → %s", report_path)


# =============================================================================
# Entrypoint
# =============================================================================


@app.callback(invoke_without_command=False)
def _root() -> None:
    """Stress Vision (SVN) — CLI entrypoint."""
    return


def main() -> None:
    app()


if __name__ == "__main__":
    main()
