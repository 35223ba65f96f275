from __future__ import annotations

import math

import numpy as np

from radar3d.core.config import ChartConfig, ScalingPolicy


def normalize_value(raw_value: float, config: ChartConfig) -> float:
    """Map raw_value into [0, scale_factor] by the configured min/max; no clamping."""
    span = config.normalization_max - config.normalization_min
    return (float(raw_value) - config.normalization_min) / span * config.normalization_scale_factor


def scale_value(raw_value: float, config: ChartConfig) -> float:
    # Zero and negative values collapse to 0 under every policy.
    if raw_value <= 0:
        return 0.0
    if config.scaling is ScalingPolicy.LINEAR:
        return float(raw_value) * config.linear_scale_factor
    if config.scaling is ScalingPolicy.LOGARITHMIC_BASE2:
        return math.log2(raw_value)
    return float(raw_value)


def transform_value(raw_value: float, config: ChartConfig) -> float:
    """Display value for one raw value: normalization if enabled, otherwise scaling."""
    if config.is_normalized:
        return normalize_value(raw_value, config)
    return scale_value(raw_value, config)


def transform_values(values, config: ChartConfig) -> np.ndarray:
    """Vectorised transform_value over an array of raw values."""
    v = np.asarray(values, dtype=float)
    if config.is_normalized:
        span = config.normalization_max - config.normalization_min
        return (v - config.normalization_min) / span * config.normalization_scale_factor

    positive = v > 0
    out = np.zeros_like(v, dtype=float)
    if config.scaling is ScalingPolicy.LINEAR:
        out[positive] = v[positive] * config.linear_scale_factor
    elif config.scaling is ScalingPolicy.LOGARITHMIC_BASE2:
        out[positive] = np.log2(v[positive])
    else:
        out[positive] = v[positive]
    return out
