"""Input validation: shape, date and value checks before any computation."""

from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np
import pandas as pd

from ..errors import InputShapeMismatchError

WEEK = pd.Timedelta(days=7)


@dataclass
class ValidationIssue:
    severity: str  # "error", "warning"
    category: str
    message: str
    details: str = ""


@dataclass
class ValidationReport:
    is_valid: bool = True
    issues: list[ValidationIssue] = field(default_factory=list)
    stats: dict = field(default_factory=dict)

    def add(self, severity: str, category: str, message: str, details: str = ""):
        issue = ValidationIssue(severity=severity, category=category, message=message, details=details)
        self.issues.append(issue)
        if severity == "error":
            self.is_valid = False

    @property
    def errors(self) -> list[ValidationIssue]:
        return [i for i in self.issues if i.severity == "error"]

    @property
    def warnings(self) -> list[ValidationIssue]:
        return [i for i in self.issues if i.severity == "warning"]


@dataclass(frozen=True)
class WeeklyInput:
    """Validated observations, ready for the engine."""

    x: np.ndarray
    dates: pd.DatetimeIndex
    holidays: pd.DataFrame | None = None


def _parse_dates(dates) -> pd.DatetimeIndex | None:
    if isinstance(dates, pd.DatetimeIndex):
        return dates
    values = pd.Series(dates)
    if pd.api.types.is_numeric_dtype(values) or pd.api.types.is_bool_dtype(values):
        return None
    try:
        return pd.DatetimeIndex(pd.to_datetime(values, errors="raise"))
    except (ValueError, TypeError):
        return None


def validate_inputs(
    x,
    dates,
    holidays: pd.DataFrame | np.ndarray | None = None,
    method: str = "additive",
) -> ValidationReport:
    """Check observations, dates and an optional holiday matrix."""
    report = ValidationReport()

    values = pd.to_numeric(pd.Series(np.asarray(x).ravel()), errors="coerce").to_numpy(dtype=float)
    if len(values) == 0:
        report.add("error", "empty", "No observations supplied.")
        return report

    if len(dates) != len(values):
        report.add("error", "length", f"{len(values)} observation(s) but {len(dates)} date(s).")
        return report

    n_bad = int((~np.isfinite(values)).sum())
    if n_bad > 0:
        report.add("error", "values", f"{n_bad} missing or non-finite observation(s).", "Gaps must be filled before adjustment.")

    if method == "multiplicative" and np.any(values[np.isfinite(values)] <= 0):
        report.add("error", "values", "Multiplicative adjustment requires strictly positive observations.")

    idx = _parse_dates(dates)
    if idx is None or idx.isna().any():
        report.add("error", "dates", "Dates could not be parsed as calendar dates.")
        return report

    n_dups = int(idx.duplicated().sum())
    if n_dups > 0:
        report.add("error", "dates", f"{n_dups} duplicate date(s) found.")
    elif not idx.is_monotonic_increasing:
        report.add("error", "dates", "Dates must be in ascending order.")
    elif len(idx) > 1:
        diffs = pd.Series(idx).diff().dropna()
        n_off = int((diffs != WEEK).sum())
        if n_off > 0:
            report.add("error", "dates", f"{n_off} interval(s) differ from 7 days.", "The engine needs a complete weekly series.")

    if holidays is not None:
        n_rows = np.shape(holidays)[0]
        if n_rows != len(values):
            report.add("error", "holidays", f"Holiday matrix has {n_rows} row(s), expected {len(values)}.")
        else:
            try:
                hol_values = np.asarray(holidays, dtype=float)
            except (ValueError, TypeError):
                hol_values = None
            if hol_values is None:
                report.add("error", "holidays", "Holiday matrix must be numeric.")
            elif not np.all(np.isfinite(hol_values)):
                report.add("error", "holidays", "Holiday matrix contains non-finite values.")

    if len(values) < 104:
        report.add("warning", "sparse_history", f"Only {len(values)} weeks supplied; two years or more recommended.")

    report.stats["n_obs"] = len(values)
    report.stats["date_range"] = (str(idx[0].date()), str(idx[-1].date()))
    report.stats["n_years"] = int(idx.year.nunique())
    return report


def ensure_valid(
    x,
    dates,
    holidays: pd.DataFrame | np.ndarray | None = None,
    method: str = "additive",
) -> WeeklyInput:
    """Validate inputs and return them normalised, or raise InputShapeMismatchError."""
    report = validate_inputs(x, dates, holidays, method)
    if not report.is_valid:
        raise InputShapeMismatchError("; ".join(e.message for e in report.errors))

    idx = _parse_dates(dates).normalize()
    idx = pd.DatetimeIndex(idx, name="date")
    if holidays is None:
        hol = None
    elif isinstance(holidays, pd.DataFrame):
        hol = holidays.reset_index(drop=True).astype(float)
    else:
        arr = np.asarray(holidays, dtype=float).reshape(len(idx), -1)
        hol = pd.DataFrame(arr, columns=[f"H{i + 1}" for i in range(arr.shape[1])])
    if hol is not None and hol.shape[1] == 0:
        hol = None

    return WeeklyInput(x=np.asarray(x, dtype=float).ravel().copy(), dates=idx, holidays=hol)
