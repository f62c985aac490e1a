"""Information-criterion search for the number of trigonometric regressors."""

from __future__ import annotations

import logging
from dataclasses import dataclass

import numpy as np
import pandas as pd
import statsmodels.api as sm

from ..regression.design import build_design

logger = logging.getLogger(__name__)

K_GRID = tuple(range(0, 37, 6))  # yearly pairs
L_GRID = tuple(range(0, 13, 6))  # monthly pairs
CRITERIA = ("aic", "aicc", "bic")


@dataclass
class OrderSelection:
    """Criterion values on the (k, l) grid and the minimising orders."""

    aic: pd.DataFrame
    aicc: pd.DataFrame
    bic: pd.DataFrame

    def grid(self, ic: str) -> pd.DataFrame:
        if ic not in CRITERIA:
            raise ValueError(f"Unknown information criterion: {ic}. Available: {list(CRITERIA)}")
        return getattr(self, ic)

    def best(self, ic: str = "aicc") -> tuple[int, int]:
        """(k, l) with the smallest criterion value; ties go to the smaller k, then l."""
        values = self.grid(ic).to_numpy()
        i, j = np.unravel_index(np.argmin(values), values.shape)
        return K_GRID[i], L_GRID[j]

    @property
    def opt_aic(self) -> tuple[int, int]:
        return self.best("aic")

    @property
    def opt_aicc(self) -> tuple[int, int]:
        return self.best("aicc")

    @property
    def opt_bic(self) -> tuple[int, int]:
        return self.best("bic")


def information_criteria(y: np.ndarray, x: np.ndarray) -> dict[str, float]:
    """AIC, AICc and BIC of an OLS fit of y on x without intercept."""
    n = len(y)
    if x.shape[1] == 0:
        ssr = float(y @ y)
        llf = -n / 2.0 * (np.log(2 * np.pi * ssr / n) + 1)
        aic, bic, p = -2 * llf, -2 * llf, 0
    else:
        res = sm.OLS(y, x, hasconst=False).fit()
        aic, bic = float(res.aic), float(res.bic)
        p = int(res.df_model + res.k_constant)

    aicc = aic + 2 * p * (p + 1) / (n - p - 1) if n - p - 1 > 0 else np.inf
    return {"aic": aic, "aicc": aicc, "bic": bic}


def select_order(
    y: np.ndarray,
    dates,
    holidays: pd.DataFrame | None = None,
    ao_dates=None,
) -> OrderSelection:
    """Evaluate every (k, l) on the grid by AIC, AICc and BIC.

    The regression of the detrended series y on the harmonic, holiday and
    outlier columns has no intercept.
    """
    y = np.asarray(y, dtype=float)
    shape = (len(K_GRID), len(L_GRID))
    grids = {ic: np.full(shape, np.nan) for ic in CRITERIA}

    for i, k in enumerate(K_GRID):
        for j, l in enumerate(L_GRID):
            design = build_design(dates, (k, l), holidays, ao_dates)
            for ic, value in information_criteria(y, design.values).items():
                grids[ic][i, j] = value

    index = [f"k = {k}" for k in K_GRID]
    columns = [f"l = {l}" for l in L_GRID]
    selection = OrderSelection(**{ic: pd.DataFrame(grids[ic], index=index, columns=columns) for ic in CRITERIA})
    logger.debug(f"Order search: aic={selection.opt_aic}, aicc={selection.opt_aicc}, bic={selection.opt_bic}")
    return selection
