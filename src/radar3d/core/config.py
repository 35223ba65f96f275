from __future__ import annotations

import json
from dataclasses import dataclass, fields
from enum import Enum
from typing import Any

from radar3d.core.errors import ConfigError

CONFIG_VERSION = 1


class ScalingPolicy(str, Enum):
    """Scaling applied to raw values when normalization is off."""

    NO_SCALING = "NoScaling"
    LINEAR = "Linear"
    LOGARITHMIC_BASE2 = "Logarithmic_Base2"


class InvalidValuePolicy(str, Enum):
    """What to do with a dataset row whose value is not an integer."""

    DEFAULT = "default"  # keep the row with value 0
    SKIP = "skip"
    FAIL = "fail"


@dataclass(frozen=True)
class ChartConfig:
    """Immutable configuration for one radar chart instance."""

    data_source: str = ""
    color_source: str = ""
    chart_scale: float = 1.0
    chart_origin_offset: float = 0.0
    point_distance: float = 1.0
    is_normalized: bool = False
    normalization_min: float = 0.0
    normalization_max: float = 1.0
    normalization_scale_factor: float = 10.0
    scaling: ScalingPolicy = ScalingPolicy.NO_SCALING
    linear_scale_factor: float = 1.0
    point_alpha: int = 255
    polygon_alpha: int = 128
    invalid_value_policy: InvalidValuePolicy = InvalidValuePolicy.DEFAULT
    fetch_timeout: float = 30.0

    def __post_init__(self) -> None:
        # Enum fields accept their string values as well.
        object.__setattr__(self, "scaling", _coerce_enum(ScalingPolicy, self.scaling, "scaling"))
        object.__setattr__(
            self,
            "invalid_value_policy",
            _coerce_enum(InvalidValuePolicy, self.invalid_value_policy, "invalid_value_policy"),
        )
        if self.chart_scale <= 0:
            raise ConfigError(f"chart_scale must be positive, got {self.chart_scale}.")
        if self.point_distance <= 0:
            raise ConfigError(f"point_distance must be positive, got {self.point_distance}.")
        if self.normalization_max == self.normalization_min:
            raise ConfigError("normalization_min and normalization_max must differ.")
        for name in ("point_alpha", "polygon_alpha"):
            alpha = getattr(self, name)
            if not 0 <= int(alpha) <= 255:
                raise ConfigError(f"{name} must be within 0..255, got {alpha}.")
        if self.fetch_timeout <= 0:
            raise ConfigError(f"fetch_timeout must be positive, got {self.fetch_timeout}.")

    @property
    def index_step(self) -> float:
        """Spatial distance between two neighbouring time indices."""
        return self.point_distance * self.chart_scale


def _coerce_enum(enum_cls, value: Any, name: str):
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(str(value))
    except ValueError:
        allowed = ", ".join(m.value for m in enum_cls)
        raise ConfigError(f"Unknown {name} '{value}'; expected one of: {allowed}.") from None


_FLOAT_FIELDS = {
    "chart_scale",
    "chart_origin_offset",
    "point_distance",
    "normalization_min",
    "normalization_max",
    "normalization_scale_factor",
    "linear_scale_factor",
    "fetch_timeout",
}
_INT_FIELDS = {"point_alpha", "polygon_alpha"}
_STR_FIELDS = {"data_source", "color_source"}


def config_to_dict(config: ChartConfig) -> dict[str, Any]:
    out: dict[str, Any] = {"version": CONFIG_VERSION}
    for f in fields(config):
        value = getattr(config, f.name)
        if isinstance(value, Enum):
            value = value.value
        out[f.name] = value
    return out


def config_from_dict(settings: Any) -> ChartConfig:
    """Build a config from a settings dict; unknown keys are ignored."""
    if not isinstance(settings, dict):
        raise ConfigError("Chart settings must be a JSON object.")
    kwargs: dict[str, Any] = {}
    for f in fields(ChartConfig):
        if f.name not in settings or settings[f.name] is None:
            continue
        raw = settings[f.name]
        try:
            if f.name in _FLOAT_FIELDS:
                kwargs[f.name] = float(raw)
            elif f.name in _INT_FIELDS:
                kwargs[f.name] = int(raw)
            elif f.name in _STR_FIELDS:
                kwargs[f.name] = str(raw)
            elif f.name == "is_normalized":
                if not isinstance(raw, bool):
                    raise ConfigError(f"is_normalized must be true or false, got {raw!r}.")
                kwargs[f.name] = raw
            else:
                kwargs[f.name] = raw
        except (TypeError, ValueError) as exc:
            raise ConfigError(f"Invalid value for {f.name}: {raw!r}") from exc
    return ChartConfig(**kwargs)


def load_config(path: str) -> ChartConfig:
    try:
        with open(path, "r", encoding="utf-8") as f:
            obj = json.load(f)
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Config file is not valid JSON: {path}") from exc
    except OSError as exc:
        raise ConfigError(f"Unable to read config file {path}: {exc}") from exc
    return config_from_dict(obj)


def save_config(config: ChartConfig, path: str) -> None:
    with open(path, "w", encoding="utf-8") as f:
        json.dump(config_to_dict(config), f, indent=2)
