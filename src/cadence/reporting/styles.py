from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.worksheet.worksheet import Worksheet
from openpyxl.cell.cell import MergedCell

from cadence.domain.models import Intensity

class HeatmapStyle:
    """
    Visual language for exported heatmaps: GitHub-like green ramp, grey for no completion.
    """

    HEADER_BG = "374151"
    HEADER_TEXT = "FFFFFF"
    OUT_OF_YEAR_BG = "FFFFFF"

    INTENSITY_FILLS = {
        Intensity.NONE: "D1D5DB",
        Intensity.VERY_LOW: "BBF7D0",
        Intensity.LOW: "86EFAC",
        Intensity.MEDIUM: "4ADE80",
        Intensity.HIGH: "22C55E",
        Intensity.FULL: "15803D",
    }
    # "high" spans 60-99; the top of that range gets a deeper shade on screen only.
    HIGH_DEEP_FILL = "16A34A"
    HIGH_DEEP_FROM = 80.0

    THIN_BORDER = Side(border_style="thin", color="FFFFFF")
    BORDER_ALL = Border(top=THIN_BORDER, left=THIN_BORDER, right=THIN_BORDER, bottom=THIN_BORDER)

    @staticmethod
    def fill_color(intensity: Intensity, rate: float) -> str:
        if intensity == Intensity.HIGH and rate >= HeatmapStyle.HIGH_DEEP_FROM:
            return HeatmapStyle.HIGH_DEEP_FILL
        return HeatmapStyle.INTENSITY_FILLS[intensity]

    @staticmethod
    def apply_header_style(cell):
        """Applies header styling: dark BG, white bold text."""
        cell.font = Font(bold=True, color=HeatmapStyle.HEADER_TEXT, name="Arial", size=10)
        cell.fill = PatternFill(start_color=HeatmapStyle.HEADER_BG, end_color=HeatmapStyle.HEADER_BG, fill_type="solid")
        cell.alignment = Alignment(horizontal="center", vertical="center")

    @staticmethod
    def apply_day_fill(cell, color: str):
        cell.fill = PatternFill(start_color=color, end_color=color, fill_type="solid")
        cell.border = HeatmapStyle.BORDER_ALL

    @staticmethod
    def auto_size_columns(ws: Worksheet, cap: int = 40):
        """Simple auto-size heuristic."""
        for col in ws.columns:
            cells = [cell for cell in col if not isinstance(cell, MergedCell)]
            if not cells:
                continue
            length = max(len(str(cell.value)) if cell.value is not None else 0 for cell in cells)
            ws.column_dimensions[cells[0].column_letter].width = min((length + 2) * 1.2, cap)
