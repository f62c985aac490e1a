"""Summary report builder."""

from __future__ import annotations

import numpy as np

from ..models.results import AdjustmentResult


def build_text_report(result: AdjustmentResult) -> str:
    """Build a full-text seasonal adjustment report."""
    lines = []

    lines.append("=" * 70)
    lines.append("WEEKLY SEASONAL ADJUSTMENT REPORT")
    lines.append("=" * 70)
    lines.append("")

    lines.append("DATA OVERVIEW")
    lines.append("-" * 40)
    lines.append(f"  Observations: {len(result.x)}")
    lines.append(f"  Date range: {result.dates[0].date()} to {result.dates[-1].date()}")
    lines.append(f"  Decomposition: {result.method}")
    lines.append("")

    if result.is_degenerate:
        lines.append("RESULT")
        lines.append("-" * 40)
        lines.append(f"  {result.note}")
        lines.append("")
    else:
        k, l = result.k_l
        lines.append("MODEL")
        lines.append("-" * 40)
        lines.append(f"  Yearly trigonometric pairs: {k}")
        lines.append(f"  Monthly trigonometric pairs: {l}")
        lines.append(f"  Additive outliers: {len(result.ao_list)}")
        lines.append("")

        if result.ao_list:
            lines.append("OUTLIERS")
            lines.append("-" * 40)
            lines.append(result.outlier_table().to_string(index=False))
            lines.append("")

        lines.append("COMPONENTS")
        lines.append("-" * 40)
        centre = 1.0 if result.method == "multiplicative" else 0.0
        seasonal = result.seasonal_factors.to_numpy()
        lines.append(f"  Seasonal range: {seasonal.min():.3f} to {seasonal.max():.3f}")
        lines.append(f"  Mean absolute seasonal effect: {np.mean(np.abs(seasonal - centre)):.3f}")
        if result.model is not None:
            lines.append(f"  Full-sample OLS R2: {result.model.rsquared:.3f}")
        lines.append("")

    lines.append("=" * 70)
    lines.append("End of Report")
    lines.append("=" * 70)

    return "\n".join(lines)
