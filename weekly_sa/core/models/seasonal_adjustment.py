"""Two-pass seasonal adjustment of weekly data.

Pass 1 detrends the input, searches for outliers, picks the harmonic order
and estimates seasonal and outlier factors with the year-weighted
regression. Pass 2 re-estimates the trend on the seasonally and
outlier-adjusted series and repeats the estimation on the new detrended
series. The final trend is smoothed from the pass-2 adjusted series.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import numpy as np
import pandas as pd
import statsmodels.api as sm

from ..data.validation import ensure_valid
from ..eda.trend import Smoother, resolve_smoother
from ..regression.design import Design, build_design
from ..regression.weighted import WeightedFit, fit_year_weighted
from ..selection.order import CRITERIA, select_order
from ..selection.outliers import find_outliers
from .results import AdjustmentResult

logger = logging.getLogger(__name__)

METHODS = ("additive", "multiplicative")
DEGENERATE_NOTE = "Series should not be a candidate for seasonal adjustment because automatic selection found k=l=0"


@dataclass
class AdjustmentConfig:
    r: float = 0.8  # decay of the cross-year weights
    auto_ao_search: bool = True
    out_threshold: float = 3.8  # |T| needed to keep an outlier
    ao_list: list | None = None  # known outlier dates
    k_l: tuple[int, int] | None = None  # fixed (yearly, monthly) order; searched if None
    ic: str = "aicc"  # "aic", "aicc" or "bic"
    method: str = "additive"  # "additive" or "multiplicative"
    smoother: Smoother | None = None  # defaults to robust LOWESS

    def __post_init__(self):
        if not 0 < self.r < 1:
            raise ValueError(f"r must lie strictly between 0 and 1, got {self.r}")
        if self.ic not in CRITERIA:
            raise ValueError(f"Unknown information criterion: {self.ic}. Available: {list(CRITERIA)}")
        if self.method not in METHODS:
            raise ValueError(f"Unknown method: {self.method}. Available: {list(METHODS)}")
        if not self.out_threshold > 0:
            raise ValueError(f"out_threshold must be positive, got {self.out_threshold}")
        if self.k_l is not None:
            if len(self.k_l) != 2 or any(int(v) != v or v < 0 for v in self.k_l):
                raise ValueError(f"k_l must be two non-negative integers, got {self.k_l}")
            self.k_l = (int(self.k_l[0]), int(self.k_l[1]))


@dataclass
class _PassOutcome:
    k_l: tuple[int, int]
    ao_dates: list[pd.Timestamp]
    design: Design
    fit: WeightedFit


class WeeklySeasonalAdjuster:
    """Seasonal, holiday and outlier decomposition of one weekly series."""

    name = "Weekly SA"

    def __init__(self, config: AdjustmentConfig | None = None):
        self.config = config or AdjustmentConfig()
        self._smoother = resolve_smoother(self.config.smoother)
        self._result: AdjustmentResult | None = None

    @property
    def result(self) -> AdjustmentResult:
        if self._result is None:
            raise RuntimeError("Adjuster not fitted.")
        return self._result

    def fit(self, x, dates, holidays: pd.DataFrame | np.ndarray | None = None) -> AdjustmentResult:
        cfg = self.config
        data = ensure_valid(x, dates, holidays, cfg.method)
        dt = data.dates
        xs = np.log(data.x) if cfg.method == "multiplicative" else data.x

        fixed = self._fixed_outliers(dt)

        # Pass 1
        y = xs - self._smoother(xs)
        first = self._estimate(y, dt, data.holidays, fixed)
        if first is None:
            self._result = self._degenerate(data.x, dt)
            return self._result
        logger.info(f"Pass 1: (k, l)={first.k_l}, {len(first.ao_dates)} outlier(s)")

        # Pass 2
        adjusted = xs - first.fit.seasonal - first.fit.outlier
        y = xs - self._smoother(adjusted)
        second = self._estimate(y, dt, data.holidays, fixed)
        if second is None:
            self._result = self._degenerate(data.x, dt)
            return self._result
        logger.info(f"Pass 2: (k, l)={second.k_l}, {len(second.ao_dates)} outlier(s)")

        fit = second.fit
        sa = xs - fit.seasonal - fit.outlier
        trend = self._smoother(sa)
        model = sm.OLS(pd.Series(y, name="y"), second.design.matrix, hasconst=False).fit()

        components = {
            "sa": sa,
            "trend": trend,
            "seasonal_factors": fit.seasonal,
            "hol_factors": fit.holiday,
            "out_factors": fit.outlier,
        }
        if cfg.method == "multiplicative":
            # Each component is back-transformed on its own.
            components = {name: np.exp(values) for name, values in components.items()}

        self._result = AdjustmentResult(
            x=pd.Series(data.x, index=dt, name="x"),
            dates=dt,
            k_l=second.k_l,
            method=cfg.method,
            beta=fit.beta,
            model=model,
            ao_list=list(second.ao_dates),
            detrended=pd.Series(y, index=dt, name="detrended"),
            **{name: pd.Series(values, index=dt, name=name) for name, values in components.items()},
        )
        return self._result

    def _fixed_outliers(self, dates: pd.DatetimeIndex) -> list[pd.Timestamp]:
        if self.config.ao_list is None or len(self.config.ao_list) == 0:
            return []
        wanted = pd.DatetimeIndex(pd.to_datetime(list(self.config.ao_list))).normalize().unique()
        outside = wanted[~wanted.isin(dates)]
        if len(outside) > 0:
            logger.warning(f"Ignoring {len(outside)} outlier date(s) outside the sample: {[str(d.date()) for d in outside]}")
        return sorted(wanted[wanted.isin(dates)])

    def _estimate(
        self,
        y: np.ndarray,
        dates: pd.DatetimeIndex,
        holidays: pd.DataFrame | None,
        fixed: list[pd.Timestamp],
    ) -> _PassOutcome | None:
        """Outlier search, order selection and year-weighted fit on one detrended series."""
        cfg = self.config
        ao_dates = list(fixed)
        k_l = cfg.k_l

        if cfg.auto_ao_search:
            search = find_outliers(y, dates, cfg.out_threshold, fixed_ao=fixed, holidays=holidays, k_l=k_l)
            if search.degenerate:
                return None
            ao_dates = sorted(set(fixed) | set(search.ao_dates))

        if k_l is None:
            k_l = select_order(y, dates, holidays, ao_dates).best(cfg.ic)
            logger.info(f"Selected (k, l)={k_l} by {cfg.ic.upper()}")
        if k_l == (0, 0):
            return None

        design = build_design(dates, k_l, holidays, ao_dates)
        fit = fit_year_weighted(y, design, dates, cfg.r)
        return _PassOutcome(k_l=k_l, ao_dates=ao_dates, design=design, fit=fit)

    def _degenerate(self, x: np.ndarray, dates: pd.DatetimeIndex) -> AdjustmentResult:
        logger.info(DEGENERATE_NOTE)
        return AdjustmentResult(
            x=pd.Series(x, index=dates, name="x"),
            dates=dates,
            k_l=(0, 0),
            method=self.config.method,
            note=DEGENERATE_NOTE,
        )

    def get_params(self) -> dict:
        cfg = self.config
        return {
            "r": cfg.r,
            "auto_ao_search": cfg.auto_ao_search,
            "out_threshold": cfg.out_threshold,
            "ao_list": cfg.ao_list,
            "k_l": cfg.k_l,
            "ic": cfg.ic,
            "method": cfg.method,
        }

    def summary(self) -> str:
        if self._result is None:
            return f"{self.name}: {self.get_params()}"
        return self._result.summary()


def seasonal_adjust(
    x,
    dates,
    r: float = 0.8,
    auto_ao_search: bool = True,
    out_threshold: float = 3.8,
    ao_list: list | None = None,
    k_l: tuple[int, int] | None = None,
    holidays: pd.DataFrame | np.ndarray | None = None,
    ic: str = "aicc",
    method: str = "additive",
    smoother: Smoother | None = None,
) -> AdjustmentResult:
    """Seasonally adjust a weekly series.

    Args:
        x: Observations, one per week.
        dates: Observation dates, ascending and 7 days apart.
        r: Decay rate of the cross-year weights, in (0, 1).
        auto_ao_search: Search for additive outliers.
        out_threshold: |T| threshold of the outlier search.
        ao_list: Known additive outlier dates.
        k_l: Number of yearly and monthly trigonometric pairs. Searched over
            k in 0..36 and l in 0..12 (step 6) when None.
        holidays: Holiday and trading-day regressors, one row per week.
        ic: Criterion for the order search: "aic", "aicc" or "bic".
        method: "additive" or "multiplicative".
        smoother: Trend smoother; robust LOWESS when None.

    Returns:
        AdjustmentResult. Check ``is_degenerate`` before using components.
    """
    config = AdjustmentConfig(
        r=r,
        auto_ao_search=auto_ao_search,
        out_threshold=out_threshold,
        ao_list=ao_list,
        k_l=k_l,
        ic=ic,
        method=method,
        smoother=smoother,
    )
    return WeeklySeasonalAdjuster(config).fit(x, dates, holidays)
