from __future__ import annotations

from collections.abc import Sequence

import numpy as np

from widget_engine.config import StackingMode
from widget_engine.models import Series


def percent_stack(series: Sequence[Series]) -> list[Series]:
    """Rescale aligned series so each x-position sums to 100 (0 where the total is 0)."""
    if not series:
        return []
    lengths = {len(item.values) for item in series}
    if len(lengths) > 1:
        raise ValueError(f"percent stacking needs aligned series, got lengths {sorted(lengths)}")

    matrix = np.asarray(
        [[0.0 if value is None else float(value) for value in item.values] for item in series],
        dtype=float,
    )
    totals = matrix.sum(axis=0)
    shares = np.divide(
        matrix * 100.0,
        totals,
        out=np.zeros_like(matrix, dtype=float),
        where=totals != 0,
    )
    return [
        Series(name=item.name, values=[float(value) for value in row])
        for item, row in zip(series, shares)
    ]


def normalize_stacking(series: Sequence[Series], mode: StackingMode = "none") -> list[Series]:
    # "normal" stacking is done by the renderer; values are unchanged here
    if mode == "percent":
        return percent_stack(series)
    if mode in ("none", "normal"):
        return list(series)
    raise ValueError(f"Unsupported stacking mode: {mode}")
