# /stress_vision/models/__init__.py
# ======================================================================================
# Stress Vision (SVN)
# models package — SVSN model format + dense network evaluation
# --------------------------------------------------------------------------------------
# Public surface
# --------------
#   • DenseLayer, Model, Activation        (immutable network containers)
#   • load_model, load_model_file          (SVSN reader, raises MalformedModel)
#   • dump_model                           (SVSN writer, byte-exact with the reader)
#   • describe_model                       (JSON-able summary)
#   • infer, infer_batch, relu, softmax    (deterministic forward pass)
# ======================================================================================

from __future__ import annotations

from .dense import N_CLASSES, N_INPUTS, Activation, DenseLayer, Model, describe_model
from .forward import infer, infer_batch, relu, softmax
from .loader import MAGIC, dump_model, load_model, load_model_file

__all__ = [
    "MAGIC",
    "N_CLASSES",
    "N_INPUTS",
    "Activation",
    "DenseLayer",
    "Model",
    "describe_model",
    "dump_model",
    "infer",
    "infer_batch",
    "load_model",
    "load_model_file",
    "relu",
    "softmax",
]
