"""Holiday and working-day factors aligned to weekly observation dates.

Each observation covers the seven days ending on its date. Both builders
return one row per observation so the result can be passed straight to the
adjustment engine as the holiday matrix.
"""

from __future__ import annotations

import numpy as np
import pandas as pd


def _week_of(dates: pd.DatetimeIndex, days: pd.DatetimeIndex) -> np.ndarray:
    """Row position of the week containing each day, -1 if outside the sample."""
    pos = dates.searchsorted(days, side="left")
    inside = (pos < len(dates)) & (days >= dates[0] - pd.Timedelta(days=6))
    pos = np.where(inside, pos, -1)
    return pos


def holiday_window_factors(
    dates,
    holiday_dates: dict[str, list] | list,
    before: int = 0,
    after: int = 0,
    center: bool = False,
) -> pd.DataFrame:
    """Share of each holiday window that falls inside each week.

    Args:
        dates: Weekly observation dates.
        holiday_dates: Either a list of dates (one column named ``holiday``)
            or a mapping from holiday name to its list of dates.
        before: Days before the holiday included in its window.
        after: Days after the holiday included in its window.
        center: Subtract the mean per week of year, so the regressor only
            carries the part of the effect that moves between years.
    """
    dt = pd.DatetimeIndex(pd.to_datetime(dates)).normalize()
    if not isinstance(holiday_dates, dict):
        holiday_dates = {"holiday": holiday_dates}
    if before < 0 or after < 0:
        raise ValueError("before and after must be non-negative")

    window = before + after + 1
    result = pd.DataFrame(index=range(len(dt)))
    for name, hdates in holiday_dates.items():
        col = np.zeros(len(dt))
        for h in pd.to_datetime(list(hdates)):
            days = pd.date_range(h - pd.Timedelta(days=before), h + pd.Timedelta(days=after), freq="D")
            pos = _week_of(dt, days)
            pos = pos[pos >= 0]
            np.add.at(col, pos, 1.0 / window)
        result[name] = col

    if center:
        week = pd.Series(dt.isocalendar().week.to_numpy(dtype=int))
        result = result - result.groupby(week).transform("mean")

    return result


def working_day_factors(dates, working_days: pd.DataFrame) -> pd.DataFrame:
    """Demeaned count of full working days in each observed week.

    ``working_days`` is a daily table with a ``date`` column and a
    ``working_day_part`` column where 1 marks a full working day. Days not
    listed count as non-working.
    """
    dt = pd.DatetimeIndex(pd.to_datetime(dates)).normalize()
    if not {"date", "working_day_part"}.issubset(working_days.columns):
        raise ValueError("working_days needs 'date' and 'working_day_part' columns")

    daily = working_days.copy()
    daily["date"] = pd.to_datetime(daily["date"]).dt.normalize()
    full = daily.loc[daily["working_day_part"] == 1, "date"]
    full = pd.DatetimeIndex(full[(full >= dt[0] - pd.Timedelta(days=6)) & (full <= dt[-1])])

    counts = np.zeros(len(dt))
    pos = _week_of(dt, full)
    np.add.at(counts, pos[pos >= 0], 1.0)

    return pd.DataFrame({"td": counts - counts.mean()})
