"""Year-weighted least squares and component reconstruction.

Every calendar year gets its own fit on the full sample, with row weights
decaying as ``r ** |year(row) - year|``. Only the rows of that year take
their seasonal, holiday and outlier values from that fit, which makes the
seasonal pattern evolve from one year to the next.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

import numpy as np
import pandas as pd

from .design import Design, solve_normal_equations

logger = logging.getLogger(__name__)


def year_weights(dates, r: float = 0.8) -> dict[int, np.ndarray]:
    """Diagonal weights per distinct year, each summing to one over the sample."""
    if not 0 < r < 1:
        raise ValueError(f"r must lie strictly between 0 and 1, got {r}")
    years = pd.DatetimeIndex(pd.to_datetime(dates)).year.to_numpy()
    weights = {}
    for year in np.unique(years):
        w = r ** np.abs(years - year).astype(float)
        weights[int(year)] = w / w.sum()
    return weights


@dataclass
class WeightedFit:
    seasonal: np.ndarray
    holiday: np.ndarray
    outlier: np.ndarray
    betas: dict[int, np.ndarray] = field(default_factory=dict)
    columns: list[str] = field(default_factory=list)

    @property
    def beta(self) -> pd.Series:
        """Coefficients of the last year's fit."""
        last = max(self.betas)
        return pd.Series(self.betas[last], index=self.columns, name=last)


def fit_year_weighted(
    y: np.ndarray,
    design: Design,
    dates,
    r: float = 0.8,
) -> WeightedFit:
    """Fit ``beta_i = inv(X^T W_i X) X^T W_i y`` for each year i.

    Raises:
        SingularDesignError: when any year's weighted normal equations are
            singular.
    """
    y = np.asarray(y, dtype=float)
    x = design.values
    blocks = design.blocks
    years = pd.DatetimeIndex(pd.to_datetime(dates)).year.to_numpy()

    seasonal = np.zeros(len(y))
    holiday = np.zeros(len(y))
    outlier = np.zeros(len(y))
    betas = {}

    for year, w in year_weights(dates, r).items():
        xw = x * w[:, None]
        beta = solve_normal_equations(xw.T @ x, xw.T @ y)
        betas[year] = beta

        rows = years == year
        xi = x[rows]
        seasonal[rows] = xi[:, blocks.seasonal] @ beta[blocks.seasonal]
        holiday[rows] = xi[:, blocks.holiday] @ beta[blocks.holiday]
        outlier[rows] = xi[:, blocks.outlier] @ beta[blocks.outlier]

    logger.debug(f"Year-weighted fit over {len(betas)} year(s), {blocks.n_columns} column(s), r={r}")
    return WeightedFit(
        seasonal=seasonal,
        holiday=holiday,
        outlier=outlier,
        betas=betas,
        columns=list(design.matrix.columns),
    )
