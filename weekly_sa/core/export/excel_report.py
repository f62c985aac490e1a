"""Multi-sheet Excel workbook export."""

from __future__ import annotations

from io import BytesIO

import pandas as pd

from ..models.results import AdjustmentResult
from .summary_report import build_text_report


def _write_sheet(writer, df: pd.DataFrame, sheet_name: str, header_fmt) -> None:
    df.to_excel(writer, sheet_name=sheet_name, index=False)
    ws = writer.sheets[sheet_name]
    for i, col in enumerate(df.columns):
        ws.write(0, i, col, header_fmt)
        ws.set_column(i, i, max(15, len(str(col)) + 5))


def create_adjustment_workbook(result: AdjustmentResult) -> BytesIO:
    """Create an Excel workbook with the components, outliers, coefficients and a summary."""
    output = BytesIO()

    with pd.ExcelWriter(output, engine="xlsxwriter") as writer:
        workbook = writer.book

        header_fmt = workbook.add_format({
            "bold": True,
            "bg_color": "#1f77b4",
            "font_color": "#ffffff",
            "border": 1,
        })

        # Sheet 1: Components
        components = result.to_frame()
        components["date"] = components["date"].dt.date
        _write_sheet(writer, components, "Components", header_fmt)

        if not result.is_degenerate:
            # Sheet 2: Outliers
            outliers = result.outlier_table()
            if len(outliers) > 0:
                outliers["date"] = outliers["date"].dt.date
                _write_sheet(writer, outliers, "Outliers", header_fmt)

            # Sheet 3: Coefficients of the last year's fit
            if result.beta is not None:
                beta = result.beta.rename("coefficient").rename_axis("regressor").reset_index()
                _write_sheet(writer, beta, "Coefficients", header_fmt)

        # Sheet 4: Summary
        ws = workbook.add_worksheet("Summary")
        writer.sheets["Summary"] = ws
        title_fmt = workbook.add_format({"bold": True, "font_size": 14})
        text_fmt = workbook.add_format({"text_wrap": True, "valign": "top", "font_name": "Consolas"})

        ws.set_column(0, 0, 100)
        ws.write(0, 0, "Seasonal Adjustment Report", title_fmt)
        for i, line in enumerate(build_text_report(result).split("\n")):
            ws.write(i + 2, 0, line, text_fmt)

    output.seek(0)
    return output
