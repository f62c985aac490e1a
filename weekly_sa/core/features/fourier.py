"""Trigonometric regressors for the yearly and monthly cycles."""

from __future__ import annotations

import numpy as np
import pandas as pd


def _check_order(name: str, value: int) -> int:
    if isinstance(value, (bool, np.bool_)) or int(value) != value or value < 0:
        raise ValueError(f"{name} must be a non-negative integer, got {value!r}")
    return int(value)


def fourier_terms(dates, k: int = 1, l: int = 1) -> pd.DataFrame:
    """Build sine/cosine columns for the yearly (k pairs) and monthly (l pairs) cycles.

    Yearly terms use the day of the year over the number of days in that
    year, so leap years are handled. Monthly terms use the day of the month
    over the number of days in that month, which captures effects tied to a
    position inside the month (paydays, month ends).

    Columns are ordered yearly sines, yearly cosines, monthly sines,
    monthly cosines. With k = l = 0 the frame has no columns.
    """
    k = _check_order("k", k)
    l = _check_order("l", l)
    dt = pd.DatetimeIndex(pd.to_datetime(dates))
    result = pd.DataFrame(index=range(len(dt)))

    if k > 0:
        yt = dt.dayofyear.to_numpy(dtype=float)
        ny = np.where(dt.is_leap_year, 366.0, 365.0)
        for i in range(1, k + 1):
            result[f"S({i}/Ny)"] = np.sin(2 * np.pi * i * yt / ny)
        for i in range(1, k + 1):
            result[f"C({i}/Ny)"] = np.cos(2 * np.pi * i * yt / ny)

    if l > 0:
        mt = dt.day.to_numpy(dtype=float)
        nm = dt.days_in_month.to_numpy(dtype=float)
        for i in range(1, l + 1):
            result[f"S({i}/Nm)"] = np.sin(2 * np.pi * i * mt / nm)
        for i in range(1, l + 1):
            result[f"C({i}/Nm)"] = np.cos(2 * np.pi * i * mt / nm)

    return result
