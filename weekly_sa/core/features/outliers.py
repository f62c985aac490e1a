"""Additive outlier indicator variables."""

from __future__ import annotations

import logging

import numpy as np
import pandas as pd

logger = logging.getLogger(__name__)


def unit_column(n: int, t: int) -> np.ndarray:
    """Indicator with a single 1 at row t."""
    col = np.zeros(n)
    col[t] = 1.0
    return col


def ao_indicators(dates, ao_dates) -> pd.DataFrame:
    """One indicator column per outlier date found in ``dates``.

    Dates outside the observed sample are dropped. Duplicates are collapsed
    and columns follow the order of first appearance.
    """
    dt = pd.DatetimeIndex(pd.to_datetime(dates)).normalize()
    result = pd.DataFrame(index=range(len(dt)))
    if ao_dates is None or len(ao_dates) == 0:
        return result

    wanted = pd.DatetimeIndex(pd.to_datetime(list(ao_dates))).normalize()
    missing = wanted[~wanted.isin(dt)]
    if len(missing) > 0:
        logger.warning(f"Ignoring {len(missing)} outlier date(s) outside the sample: {[str(d.date()) for d in missing]}")

    for d in wanted[wanted.isin(dt)].unique():
        result[f"AO {d.date()}"] = (dt == d).astype(float)

    return result
