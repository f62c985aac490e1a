"""Trend smoothers used to detrend the series before the seasonal regression.

Any callable taking the observations (in time order) and returning a
smoothed array of the same length can serve as the smoother.
"""

from __future__ import annotations

from typing import Callable

import numpy as np
import pandas as pd
from statsmodels.nonparametric.smoothers_lowess import lowess

Smoother = Callable[[np.ndarray], np.ndarray]


def lowess_trend(values: np.ndarray, span_weeks: int = 104, robust_iters: int = 3) -> np.ndarray:
    """Robust LOWESS over the row index.

    The span covers ``span_weeks`` observations, wide enough that a yearly
    cycle is left in the residual rather than absorbed by the trend. The
    robustifying iterations keep isolated spikes out of the trend.
    """
    values = np.asarray(values, dtype=float)
    n = len(values)
    if n < 3:
        return values.copy()
    frac = min(1.0, span_weeks / n)
    t = np.arange(n, dtype=float)
    return lowess(values, t, frac=frac, it=robust_iters, return_sorted=False)


def moving_average_trend(values: np.ndarray, window: int = 53) -> np.ndarray:
    """Centered moving average; one full year by default."""
    series = pd.Series(np.asarray(values, dtype=float))
    return series.rolling(window=window, center=True, min_periods=1).mean().to_numpy()


def resolve_smoother(smoother: Smoother | None) -> Smoother:
    return smoother if smoother is not None else lowess_trend
