from __future__ import annotations

from collections.abc import Sequence

import numpy as np
from numpy.lib.stride_tricks import sliding_window_view

from widget_engine.config import RollingFunction, TimeSeriesConfig

_REDUCERS = {
    "mean": np.mean,
    "sum": np.sum,
    "min": np.min,
    "max": np.max,
}


def _to_float_array(values: Sequence[float | None]) -> np.ndarray:
    return np.asarray([0.0 if value is None else float(value) for value in values], dtype=float)


def cumulative(values: Sequence[float | None]) -> list[float]:
    """Running sum in positional order; missing values count as zero."""
    array = _to_float_array(values)
    if array.size == 0:
        return []
    return [float(value) for value in np.cumsum(array)]


def rolling_window(
    values: Sequence[float | None],
    periods: int,
    func: RollingFunction = "mean",
) -> list[float | None]:
    """Trailing window reduction; the first ``periods - 1`` positions are ``None``."""
    if periods <= 0:
        raise ValueError("periods must be >= 1")
    reducer = _REDUCERS.get(func)
    if reducer is None:
        raise ValueError(f"Unsupported rolling function: {func}")

    array = _to_float_array(values)
    leading = min(periods - 1, array.size)
    result: list[float | None] = [None] * leading
    if array.size < periods:
        return result

    windows = sliding_window_view(array, periods)
    result.extend(float(value) for value in reducer(windows, axis=1))
    return result


def apply_time_series_transform(
    values: Sequence[float | None],
    config: TimeSeriesConfig,
) -> list[float | None]:
    # cumulative always runs before rolling
    result: list[float | None] = list(values)
    if config.cumulative.enabled:
        result = list(cumulative(result))
    if config.rolling_window.enabled:
        result = rolling_window(
            result,
            periods=config.rolling_window.periods,
            func=config.rolling_window.function,
        )
    return result


def transformed_series_name(name: str | None, config: TimeSeriesConfig) -> str | None:
    if config.rolling_window.enabled:
        window = config.rolling_window
        return f"{name} ({window.periods}-period {window.function})"
    if config.cumulative.enabled:
        return f"{name} (cumulative)"
    return name
