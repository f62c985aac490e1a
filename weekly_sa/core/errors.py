"""Exception types raised by the adjustment engine."""

from __future__ import annotations

import numpy as np


class WeeklySAError(Exception):
    """Base class for all engine errors."""


class InputShapeMismatchError(WeeklySAError, ValueError):
    """Observations, dates or holiday matrix are malformed or misaligned."""


class SingularDesignError(WeeklySAError, np.linalg.LinAlgError):
    """Normal equations of a (weighted) regression cannot be solved."""


class CollinearCandidateError(SingularDesignError):
    """A candidate column lies in the span of the current design."""
