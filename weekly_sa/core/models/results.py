"""Container for a finished seasonal adjustment."""

from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np
import pandas as pd


@dataclass
class AdjustmentResult:
    """Output of the weekly seasonal adjustment.

    All series are indexed by the observation dates and are on the scale of
    the input, so multiplicative components are factors around one.
    ``seasonal_factors`` includes the holiday effects; ``hol_factors`` is the
    holiday part of it. In a degenerate result (no seasonal pattern found)
    every component is None and ``k_l`` is (0, 0).
    """

    x: pd.Series
    dates: pd.DatetimeIndex
    k_l: tuple[int, int]
    method: str = "additive"
    sa: pd.Series | None = None
    seasonal_factors: pd.Series | None = None
    hol_factors: pd.Series | None = None
    out_factors: pd.Series | None = None
    trend: pd.Series | None = None
    beta: pd.Series | None = None
    model: object | None = None  # statsmodels RegressionResults
    ao_list: list[pd.Timestamp] = field(default_factory=list)
    detrended: pd.Series | None = None
    note: str = ""

    @property
    def is_degenerate(self) -> bool:
        return self.sa is None

    def to_frame(self) -> pd.DataFrame:
        """One row per week: input, adjusted series, trend and components."""
        df = pd.DataFrame({"date": self.dates, "x": self.x.to_numpy()})
        if self.is_degenerate:
            return df
        df["sa"] = self.sa.to_numpy()
        df["trend"] = self.trend.to_numpy()
        df["seasonal"] = self.seasonal_factors.to_numpy()
        df["holiday"] = self.hol_factors.to_numpy()
        df["outlier"] = self.out_factors.to_numpy()
        return df

    def outlier_table(self) -> pd.DataFrame:
        """Outlier dates with their estimated effect."""
        rows = []
        for d in self.ao_list:
            effect = float(self.out_factors.loc[d]) if self.out_factors is not None else np.nan
            rows.append({"date": d, "effect": effect})
        return pd.DataFrame(rows, columns=["date", "effect"])

    def summary(self) -> str:
        """Human-readable summary of the adjustment."""
        lines = [f"Weekly seasonal adjustment ({self.method})"]
        lines.append(f"  Observations: {len(self.x)} ({self.dates[0].date()} to {self.dates[-1].date()})")
        if self.is_degenerate:
            lines.append(f"  {self.note}")
            return "\n".join(lines)

        k, l = self.k_l
        lines.append(f"  Trigonometric terms: {k} yearly, {l} monthly")
        if self.ao_list:
            lines.append(f"  Additive outliers: {', '.join(str(d.date()) for d in self.ao_list)}")
        else:
            lines.append("  Additive outliers: none")
        if self.model is not None:
            lines.append(f"  Full-sample OLS: R2={self.model.rsquared:.3f}, AIC={self.model.aic:.1f}, BIC={self.model.bic:.1f}")
        if self.note:
            lines.append(f"  {self.note}")
        return "\n".join(lines)
