"""
Error taxonomy for the Stress Vision engine.

Load-time failures all derive from MalformedModel so the engine boundary can
catch a single type and switch to the fallback interpretation. Degraded
normalisation is recoverable and is therefore a warning, not an exception.
"""
from __future__ import annotations


class StressVisionError(Exception):
    """Base class for all engine errors."""


class MalformedModel(StressVisionError):
    """The SVSN byte stream could not be turned into a valid Model."""


class BadMagic(MalformedModel):
    """The 4-byte magic tag is not ``SVSN``."""


class StructuralMismatch(MalformedModel):
    """Layer dimensions do not chain (or do not start at 8 / end at 4)."""


class UnknownActivation(MalformedModel):
    """A layer carries an activation code this engine does not implement."""

    def __init__(self, layer_index: int, code: int) -> None:
        super().__init__(f"Layer {layer_index}: unknown activation code {code}")
        self.layer_index = layer_index
        self.code = code


class TruncatedOrOverlongStream(MalformedModel):
    """The stream ended early or carried trailing bytes after the last layer."""


class DegradedNormalization(UserWarning):
    """Features were passed through without scaler parameters."""
