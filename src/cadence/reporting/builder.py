import calendar
from io import BytesIO

from openpyxl import Workbook
from openpyxl.utils import get_column_letter

from cadence.data.dto import HeatmapReport
from cadence.reporting.styles import HeatmapStyle

WEEKDAY_LABELS = ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]


class HeatmapReportBuilder:
    """
    Constructs the Excel workbook for a yearly heatmap.
    """
    def __init__(self, report: HeatmapReport):
        self.data = report
        self.wb = Workbook()
        # Remove default sheet
        self.wb.remove(self.wb.active)

    def build_report(self) -> BytesIO:
        self._create_heatmap_sheet()
        self._create_daily_sheet()

        buffer = BytesIO()
        self.wb.save(buffer)
        buffer.seek(0)
        return buffer

    def _create_heatmap_sheet(self):
        ws = self.wb.create_sheet("Heatmap", 0)
        by_date = {day.date: day for day in self.data.days}

        ws.cell(row=1, column=1, value=str(self.data.year))
        HeatmapStyle.apply_header_style(ws.cell(row=1, column=1))
        for row_offset, label in enumerate(WEEKDAY_LABELS):
            ws.cell(row=row_offset + 2, column=1, value=label)

        for week in self.data.weeks:
            col = week.index + 2
            if week.month:
                ws.cell(row=1, column=col, value=calendar.month_abbr[week.month])
            HeatmapStyle.apply_header_style(ws.cell(row=1, column=col))
            ws.column_dimensions[get_column_letter(col)].width = 4

            for row_offset, slot in enumerate(week.days):
                cell = ws.cell(row=row_offset + 2, column=col)
                day = None if slot.out_of_year else by_date.get(slot.date)
                if day is None:
                    HeatmapStyle.apply_day_fill(cell, HeatmapStyle.OUT_OF_YEAR_BG)
                    continue
                cell.value = round(day.completion_rate)
                HeatmapStyle.apply_day_fill(cell, HeatmapStyle.fill_color(day.intensity, day.completion_rate))

        ws.freeze_panes = "B2"

    def _create_daily_sheet(self):
        ws = self.wb.create_sheet("Daily")
        headers = ["Date", "Completed", "Total", "Rate %", "Intensity", "Notes"]
        for col, h in enumerate(headers, 1):
            HeatmapStyle.apply_header_style(ws.cell(row=1, column=col, value=h))

        for r, day in enumerate(self.data.days, start=2):
            ws.cell(row=r, column=1, value=day.date)
            ws.cell(row=r, column=2, value=day.completed_count)
            ws.cell(row=r, column=3, value=day.total_count)
            ws.cell(row=r, column=4, value=round(day.completion_rate, 1))
            ws.cell(row=r, column=5, value=day.intensity.value)
            ws.cell(row=r, column=6, value="\n".join(f"{n.series_name}: {n.text}" for n in day.notes))

        HeatmapStyle.auto_size_columns(ws)
