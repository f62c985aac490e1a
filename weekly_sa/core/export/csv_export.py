"""CSV export utilities."""

from __future__ import annotations

from io import BytesIO

from ..models.results import AdjustmentResult


def export_result_csv(result: AdjustmentResult) -> BytesIO:
    """Export the weekly components to CSV."""
    output = BytesIO()
    result.to_frame().to_csv(output, index=False)
    output.seek(0)
    return output


def export_outliers_csv(result: AdjustmentResult) -> BytesIO:
    """Export the outlier dates and effects to CSV."""
    output = BytesIO()
    result.outlier_table().to_csv(output, index=False)
    output.seek(0)
    return output
