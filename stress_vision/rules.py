"""
Rule-based stress classifier (NDVI + canopy temperature).

Kept for backward compatibility and for the NDVI / temperature wording used
alongside model predictions. The primary classification comes from the
engine; this is what screens showed before the model shipped.
"""
from __future__ import annotations

from enum import Enum

NDVI_SEVERE_THRESHOLD = 0.4
NDVI_MODERATE_THRESHOLD = 0.6
TEMP_SEVERE_THRESHOLD_C = 35.0


class StressLevel(Enum):
    HEALTHY = ("Healthy", "Crop shows no signs of stress. NDVI is high and temperature is normal.")
    MODERATE_STRESS = ("Moderate Stress", "Early stress detected. Monitor irrigation and nutrient levels closely.")
    SEVERE_STRESS = ("Severe Stress", "Critical stress level! Immediate irrigation or intervention required.")

    def __init__(self, label: str, description: str) -> None:
        self.label = label
        self.description = description


def classify(ndvi: float, temperature_c: float) -> StressLevel:
    if ndvi < NDVI_SEVERE_THRESHOLD and temperature_c > TEMP_SEVERE_THRESHOLD_C:
        return StressLevel.SEVERE_STRESS
    if ndvi < NDVI_MODERATE_THRESHOLD:
        return StressLevel.MODERATE_STRESS
    return StressLevel.HEALTHY


def interpret_ndvi(ndvi: float) -> str:
    if ndvi < 0.2:
        return "Bare soil or dead vegetation"
    if ndvi < 0.4:
        return "Sparse or severely stressed vegetation"
    if ndvi < 0.6:
        return "Moderate vegetation, possible stress"
    if ndvi < 0.8:
        return "Dense healthy vegetation"
    return "Very dense, vigorous vegetation"


def interpret_temperature(temperature_c: float) -> str:
    if temperature_c < 25.0:
        return "Cool — optimal range"
    if temperature_c < 30.0:
        return "Normal canopy temperature"
    if temperature_c < 35.0:
        return "Slightly warm — monitor irrigation"
    if temperature_c < 40.0:
        return "Hot — water stress likely"
    return "Critical heat stress"


def format_ndvi(ndvi: float) -> str:
    return f"{ndvi:.2f}"


def format_temperature(temperature_c: float) -> str:
    return f"{temperature_c:.1f}°C"
