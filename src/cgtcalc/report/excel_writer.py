"""ExcelWriter — builds the CGT workbook with openpyxl."""

from io import BytesIO

from openpyxl import Workbook
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter

from cgtcalc.report.data_collector import ReportData

GBP_FORMAT = "£#,##0.00"
GAIN_FORMAT = "£#,##0.00;[Red]-£#,##0.00"

# Sheet definitions: (sheet_name, headers, data_attr, number_formats)
# number_formats: dict of column_index (0-based) → openpyxl number format
SHEET_DEFS: list[tuple[str, list[str], str, dict[int, str]]] = [
    (
        "summary",
        ["Metric", "Value"],
        "summary",
        {},
    ),
    (
        "disposals",
        [
            "Date", "Tax Year", "Exchange", "Kind", "Buy Asset", "Buy Amount", "Sell Asset",
            "Sell Amount", "Rate", "Buy Value (GBP)", "Proceeds (GBP)", "Fee (GBP)",
            "Allowable Costs (GBP)", "Gain/Loss (GBP)",
        ],
        "disposals",
        {
            5: "#,##0.00000000", 7: "#,##0.00000000", 8: "#,##0.00######",
            9: GBP_FORMAT, 10: GBP_FORMAT, 11: GBP_FORMAT, 12: GBP_FORMAT, 13: GAIN_FORMAT,
        },
    ),
    (
        "pools",
        ["Asset", "Holding", "Allowable Costs (GBP)", "Cost Basis/Unit (GBP)"],
        "pools",
        {1: "#,##0.00000000", 2: GBP_FORMAT, 3: GBP_FORMAT},
    ),
]

HEADER_FONT = Font(bold=True)


class ExcelWriter:
    """Writes ReportData to an in-memory Excel buffer."""

    def write_to_buffer(self, data: ReportData) -> BytesIO:
        wb = Workbook()

        for idx, (sheet_name, headers, data_attr, num_fmts) in enumerate(SHEET_DEFS):
            if idx == 0:
                ws = wb.active
                ws.title = sheet_name
            else:
                ws = wb.create_sheet(title=sheet_name)

            for col_idx, header in enumerate(headers, start=1):
                cell = ws.cell(row=1, column=col_idx, value=header)
                cell.font = HEADER_FONT

            for row_idx, row in enumerate(getattr(data, data_attr, []), start=2):
                for col_idx, value in enumerate(row, start=1):
                    cell = ws.cell(row=row_idx, column=col_idx, value=value)
                    fmt = num_fmts.get(col_idx - 1)  # col_idx is 1-based, num_fmts keys are 0-based
                    if fmt:
                        cell.number_format = fmt

            ws.freeze_panes = "A2"
            _auto_fit_columns(ws)

        buf = BytesIO()
        wb.save(buf)
        buf.seek(0)
        return buf


def _auto_fit_columns(ws) -> None:
    """Set column widths based on content (approximate)."""
    for col_cells in ws.columns:
        col_letter = get_column_letter(col_cells[0].column)
        max_len = max((len(str(c.value)) for c in col_cells if c.value is not None), default=0)
        ws.column_dimensions[col_letter].width = min(max_len + 3, 50)
