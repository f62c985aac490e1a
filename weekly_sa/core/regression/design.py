"""Design matrix assembly: harmonic, holiday and outlier blocks."""

from __future__ import annotations

import warnings
from dataclasses import dataclass

import numpy as np
import pandas as pd
from scipy import linalg

from ..errors import SingularDesignError
from ..features.fourier import fourier_terms
from ..features.outliers import ao_indicators


@dataclass(frozen=True)
class DesignBlocks:
    """Column counts of the three blocks, in matrix order."""

    n_harmonic: int
    n_holiday: int
    n_outlier: int

    @property
    def harmonic(self) -> slice:
        return slice(0, self.n_harmonic)

    @property
    def holiday(self) -> slice:
        return slice(self.n_harmonic, self.n_harmonic + self.n_holiday)

    @property
    def outlier(self) -> slice:
        start = self.n_harmonic + self.n_holiday
        return slice(start, start + self.n_outlier)

    @property
    def seasonal(self) -> slice:
        """Harmonic and holiday columns together."""
        return slice(0, self.n_harmonic + self.n_holiday)

    @property
    def n_columns(self) -> int:
        return self.n_harmonic + self.n_holiday + self.n_outlier


@dataclass(frozen=True)
class Design:
    matrix: pd.DataFrame
    blocks: DesignBlocks

    @property
    def values(self) -> np.ndarray:
        return self.matrix.to_numpy(dtype=float)


def build_design(
    dates,
    k_l: tuple[int, int],
    holidays: pd.DataFrame | None = None,
    ao_dates=None,
) -> Design:
    """Concatenate harmonic, holiday and outlier columns for the given order."""
    harmonic = fourier_terms(dates, k=k_l[0], l=k_l[1])
    hol = holidays.reset_index(drop=True) if holidays is not None else pd.DataFrame(index=harmonic.index)
    ao = ao_indicators(dates, ao_dates)
    matrix = pd.concat([harmonic, hol, ao], axis=1)
    return Design(
        matrix=matrix,
        blocks=DesignBlocks(harmonic.shape[1], hol.shape[1], ao.shape[1]),
    )


def solve_normal_equations(xtx: np.ndarray, xty: np.ndarray) -> np.ndarray:
    """Solve ``xtx @ beta = xty``, failing loudly on a singular system."""
    if xtx.shape[0] == 0:
        return np.zeros(0)
    with warnings.catch_warnings():
        warnings.simplefilter("error", linalg.LinAlgWarning)
        try:
            return linalg.solve(xtx, xty, assume_a="sym")
        except (linalg.LinAlgError, linalg.LinAlgWarning) as e:
            raise SingularDesignError(f"Normal equations are singular or ill-conditioned ({xtx.shape[0]} columns): {e}") from e


def cross_product_inverse(x: np.ndarray) -> np.ndarray:
    """``inv(X^T X)`` for a full-column-rank X."""
    xtx = x.T @ x
    if xtx.shape[0] == 0:
        return np.zeros((0, 0))
    return solve_normal_equations(xtx, np.eye(xtx.shape[0]))


def ols_fit(y: np.ndarray, x: np.ndarray) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Unweighted least squares without intercept.

    Returns (beta, residuals, inv(X^T X)).
    """
    xtx_inv = cross_product_inverse(x)
    beta = xtx_inv @ (x.T @ y)
    resid = y - x @ beta
    return beta, resid, xtx_inv
