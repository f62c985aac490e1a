"""Stepwise search for additive outliers in a detrended weekly series.

The forward pass scores every remaining date as a candidate indicator
column. Scoring uses the rank-one update of ``inv(X^T X)`` so a candidate
costs a few matrix-vector products instead of a fresh inversion. The best
candidate is kept while its studentized statistic clears the threshold.
A backward pass then refits the full model and drops the weakest outlier
until every survivor is significant.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import numpy as np
import pandas as pd

from ..errors import CollinearCandidateError
from ..features.outliers import unit_column
from ..regression.design import build_design, ols_fit
from ..regression.rank_update import rank_one_update
from .order import select_order

logger = logging.getLogger(__name__)

ROBUST_SCALE = 1.49  # MAD to normal standard deviation


def robust_sigma(resid: np.ndarray) -> float:
    return ROBUST_SCALE * float(np.median(np.abs(resid)))


@dataclass(frozen=True)
class OutlierSearch:
    """Outcome of the search.

    ``degenerate`` is set when the harmonic order resolved to (0, 0); the
    series has no seasonal pattern to adjust and no search was run.
    """

    ao_dates: tuple[pd.Timestamp, ...]
    k_l: tuple[int, int]
    degenerate: bool = False


@dataclass(frozen=True)
class SearchState:
    """Snapshot of the forward search between rounds."""

    design: np.ndarray
    xtx_inv: np.ndarray
    pool: tuple[int, ...]
    selected: tuple[int, ...]


def candidate_statistics(state: SearchState, y: np.ndarray, sigma: float) -> np.ndarray:
    """|T| of each candidate in the pool; collinear candidates score -inf."""
    x_t = state.design.T
    xty = x_t @ y
    n = len(y)
    stats = np.full(len(state.pool), -np.inf)
    for i, t in enumerate(state.pool):
        v = unit_column(n, t)
        try:
            inv_t = rank_one_update(state.xtx_inv, x_t, v)
        except CollinearCandidateError:
            continue
        coef = inv_t[-1, :-1] @ xty + inv_t[-1, -1] * y[t]
        stats[i] = abs(coef) / (sigma * np.sqrt(inv_t[-1, -1]))
    return stats


def forward_step(state: SearchState, y: np.ndarray, sigma: float, threshold: float) -> SearchState | None:
    """Add the most significant candidate, or return None when none qualifies."""
    if not state.pool:
        return None
    stats = candidate_statistics(state, y, sigma)
    best = int(np.argmax(stats))
    logger.debug(f"Forward round {len(state.selected) + 1}: max |T| = {stats[best]:.3f}")
    if stats[best] < threshold:
        return None

    t = state.pool[best]
    v = unit_column(len(y), t)
    return SearchState(
        design=np.column_stack([state.design, v]),
        xtx_inv=rank_one_update(state.xtx_inv, state.design.T, v),
        pool=state.pool[:best] + state.pool[best + 1:],
        selected=state.selected + (t,),
    )


def backward_eliminate(
    y: np.ndarray,
    base: np.ndarray,
    selected: tuple[int, ...],
    threshold: float,
) -> tuple[int, ...]:
    """Drop the weakest selected outlier until all have |T| >= threshold."""
    n = len(y)
    kept = list(selected)
    for _ in range(len(selected)):
        if not kept:
            break
        x = np.column_stack([base] + [unit_column(n, t) for t in kept])
        beta, resid, xtx_inv = ols_fit(y, x)
        sigma = robust_sigma(resid)
        se = sigma * np.sqrt(np.diag(xtx_inv))
        tstats = np.abs(beta / se)[base.shape[1]:]
        weakest = int(np.argmin(tstats))
        if tstats[weakest] >= threshold:
            break
        logger.debug(f"Backward elimination drops row {kept[weakest]} (|T| = {tstats[weakest]:.3f})")
        kept.pop(weakest)
    return tuple(kept)


def find_outliers(
    y: np.ndarray,
    dates,
    threshold: float = 3.8,
    fixed_ao=None,
    holidays: pd.DataFrame | None = None,
    k_l: tuple[int, int] | None = None,
) -> OutlierSearch:
    """Search for additive outliers in the detrended series ``y``.

    Args:
        y: Detrended observations.
        dates: Weekly dates aligned with ``y``.
        threshold: |T| needed to add or keep an outlier.
        fixed_ao: Known outlier dates; always in the model, never candidates.
        holidays: Optional holiday/trading-day matrix.
        k_l: Harmonic order; chosen by AICc when omitted.
    """
    y = np.asarray(y, dtype=float)
    dt = pd.DatetimeIndex(pd.to_datetime(dates)).normalize()
    fixed = pd.DatetimeIndex(pd.to_datetime(list(fixed_ao) if fixed_ao is not None else [])).normalize()
    fixed = fixed[fixed.isin(dt)]

    if k_l is None:
        k_l = select_order(y, dt, holidays, fixed).best("aicc")
    k_l = (int(k_l[0]), int(k_l[1]))
    if k_l == (0, 0):
        logger.info("Harmonic order (0, 0): no seasonal pattern, outlier search skipped")
        return OutlierSearch(ao_dates=(), k_l=k_l, degenerate=True)

    base = build_design(dt, k_l, holidays, fixed).values
    beta, resid, xtx_inv = ols_fit(y, base)
    sigma = robust_sigma(resid)
    if sigma == 0:
        logger.info("Zero residual scale, outlier search skipped")
        return OutlierSearch(ao_dates=(), k_l=k_l)

    state = SearchState(
        design=base,
        xtx_inv=xtx_inv,
        pool=tuple(int(t) for t in np.flatnonzero(~dt.isin(fixed))),
        selected=(),
    )
    while True:
        step = forward_step(state, y, sigma, threshold)
        if step is None:
            break
        state = step

    kept = backward_eliminate(y, base, state.selected, threshold)
    ao_dates = tuple(sorted(dt[list(kept)]))
    logger.info(
        f"Outlier search (k, l)={k_l}: {len(state.selected)} added, {len(state.selected) - len(kept)} dropped, "
        f"{len(ao_dates)} kept"
    )
    return OutlierSearch(ao_dates=ao_dates, k_l=k_l)
