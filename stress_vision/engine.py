# stress_vision/engine.py
# ======================================================================================
# Stress Vision (SVN)
# StressVisionEngine: owned, load-once inference engine
# --------------------------------------------------------------------------------------
# Lifecycle
# ---------
#   engine = StressVisionEngine(model_path, scaler_path)
#   engine.load()            # or engine.load_async() to keep the caller's thread free
#   engine.predict_ndvi(0.72)
#
#   • load() runs at most once. Model problems (missing file, MalformedModel) leave
#     the engine unavailable and every prediction uses the fallback interpretation.
#   • A missing/invalid scaler is recoverable: the model still runs on raw features
#     and results carry normalization_degraded=True.
#   • The loaded flag is a threading.Event set only after model + scaler are
#     installed, so any thread that sees it set also sees both.
#   • After load nothing is mutated; predict() is safe from any number of threads.
# ======================================================================================

from __future__ import annotations

import threading
import warnings
from concurrent.futures import Future, ThreadPoolExecutor
from pathlib import Path
from typing import Any, Dict, Optional, Sequence

from .errors import DegradedNormalization, MalformedModel
from .features import IDX_NDMI, IDX_NDVI, IDX_RE_NDVI, as_feature_vector, estimate, from_full_bands
from .interpret import PredictionResult, fallback_result, interpret
from .models import Model, describe_model, infer, load_model_file
from .scaler import Scaler, load_scaler, normalize
from .utils.logging_utils import get_logger

log = get_logger("svn.engine")


class StressVisionEngine:
    """Holds the single model + scaler for a process and serves predictions."""

    def __init__(self, model_path: Optional[str | Path] = None, scaler_path: Optional[str | Path] = None) -> None:
        self.model_path = Path(model_path) if model_path else None
        self.scaler_path = Path(scaler_path) if scaler_path else None

        self._model: Optional[Model] = None
        self._scaler: Optional[Scaler] = None
        self._loaded = threading.Event()
        self._load_lock = threading.Lock()
        self._load_attempted = False
        self.load_error: Optional[str] = None

    @classmethod
    def from_config(cls, cfg: Dict[str, Any]) -> "StressVisionEngine":
        ecfg = cfg.get("engine", {}) or {}
        return cls(model_path=ecfg.get("model_path"), scaler_path=ecfg.get("scaler_path"))

    # ----------------------------- state -------------------------------------------

    @property
    def is_loaded(self) -> bool:
        return self._loaded.is_set()

    @property
    def normalization_degraded(self) -> bool:
        return self._scaler is None

    @property
    def model(self) -> Optional[Model]:
        return self._model if self.is_loaded else None

    def wait_until_loaded(self, timeout: Optional[float] = None) -> bool:
        return self._loaded.wait(timeout)

    # ----------------------------- loading -----------------------------------------

    def _read_model(self) -> Optional[Model]:
        if self.model_path is None:
            self.load_error = "no model path configured"
            log.warning("No model path configured; using fallback interpretation.")
            return None
        try:
            model = load_model_file(self.model_path)
        except (MalformedModel, OSError) as e:
            self.load_error = f"{type(e).__name__}: {e}"
            log.error("Model load failed (%s): %s", self.model_path, self.load_error)
            return None
        return model

    def _read_scaler(self) -> Optional[Scaler]:
        if self.scaler_path is None:
            reason = "no scaler path configured"
        else:
            try:
                return load_scaler(self.scaler_path)
            except (OSError, ValueError) as e:
                reason = f"{type(e).__name__}: {e}"
        log.warning("Scaler unavailable (%s); running with degraded normalisation.", reason)
        warnings.warn(f"Scaler unavailable ({reason})", DegradedNormalization, stacklevel=3)
        return None

    def load(self) -> bool:
        """Load model and scaler once. Returns True if the model is available."""
        with self._load_lock:
            if self._load_attempted:
                return self.is_loaded
            self._load_attempted = True

            model = self._read_model()
            if model is None:
                return False
            self._scaler = self._read_scaler()
            self._model = model
            self._loaded.set()

        info = describe_model(model)
        log.info(
            "Model loaded: v%s topology=%s params=%d scaler=%s",
            info["format_version"],
            info["topology"],
            info["n_params"],
            "yes" if self._scaler is not None else "no",
        )
        return True

    def load_async(self, executor: Optional[ThreadPoolExecutor] = None) -> Future:
        """Run load() on a background thread; the Future resolves to load()'s result."""
        if executor is not None:
            return executor.submit(self.load)
        own = ThreadPoolExecutor(max_workers=1, thread_name_prefix="svn-load")
        try:
            return own.submit(self.load)
        finally:
            own.shutdown(wait=False)

    # ----------------------------- inference ---------------------------------------

    def predict(self, features: Sequence[float]) -> PredictionResult:
        """Predict from a raw (un-normalised) 8-feature vector."""
        x = as_feature_vector(features)
        if not self.is_loaded:
            return fallback_result(x[IDX_NDVI])

        probs = infer(self._model, normalize(x, self._scaler))  # type: ignore[arg-type]
        return interpret(
            probs,
            x[IDX_NDVI],
            x[IDX_NDMI],
            x[IDX_RE_NDVI],
            normalization_degraded=self._scaler is None,
        )

    def predict_ndvi(self, vegetation_index: float) -> PredictionResult:
        """Predict when only NDVI is known (remaining features estimated)."""
        return self.predict(estimate(vegetation_index))

    def predict_bands(
        self,
        ndvi: float,
        ndmi: float,
        re_ndvi: float,
        red: float,
        nir: float,
        red_edge: float,
        swir: float,
        canopy_temp: float,
    ) -> PredictionResult:
        """Predict from fully observed Sentinel-2 bands."""
        return self.predict(from_full_bands(ndvi, ndmi, re_ndvi, red, nir, red_edge, swir, canopy_temp))

