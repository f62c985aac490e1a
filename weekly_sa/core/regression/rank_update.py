"""Inverse of a cross-product matrix after appending one column."""

from __future__ import annotations

import numpy as np

from ..errors import CollinearCandidateError

# Relative size below which the Schur complement is treated as zero.
SCHUR_RTOL = 1e-10


def rank_one_update(xtx_inv: np.ndarray, x_t: np.ndarray, v: np.ndarray) -> np.ndarray:
    """Return ``inv([X v]^T [X v])`` given ``inv(X^T X)``, ``X^T`` and ``v``.

    Uses the block inverse with the Schur complement
    ``s = v^T v - v^T X inv(X^T X) X^T v``::

        u1 = X^T v
        u2 = inv(X^T X) u1
        d  = 1 / s
        [[inv(X^T X) + d u2 u2^T, -d u2],
         [-d u2^T,                 d  ]]

    Raises:
        CollinearCandidateError: if ``v`` is (numerically) in the column
            span of ``X``.
    """
    v = np.asarray(v, dtype=float).ravel()
    vtv = float(v @ v)
    if x_t.shape[0] == 0:
        if vtv <= 0:
            raise CollinearCandidateError("Candidate column is zero.")
        return np.array([[1.0 / vtv]])

    u1 = x_t @ v
    u2 = xtx_inv @ u1
    schur = vtv - float(u1 @ u2)
    if not np.isfinite(schur) or schur <= SCHUR_RTOL * max(vtv, 1.0):
        raise CollinearCandidateError(f"Candidate column is collinear with the design (Schur complement {schur:.3g}).")

    d = 1.0 / schur
    u3 = d * u2
    n = xtx_inv.shape[0]
    out = np.empty((n + 1, n + 1))
    out[:n, :n] = xtx_inv + d * np.outer(u2, u2)
    out[:n, n] = -u3
    out[n, :n] = -u3
    out[n, n] = d
    return out
