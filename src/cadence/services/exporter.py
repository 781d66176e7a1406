from pathlib import Path
from typing import List, Optional, Sequence

import pandas as pd

from cadence.config import settings
from cadence.data.dto import CalendarDay, HeatmapReport
from cadence.reporting.builder import HeatmapReportBuilder


def days_frame(days: Sequence[CalendarDay]) -> pd.DataFrame:
    """Flat table of aggregated days, one row per date."""
    rows = [
        {
            "date": day.date,
            "completed_count": day.completed_count,
            "total_count": day.total_count,
            "completion_rate": day.completion_rate,
            "intensity": day.intensity.value,
            "completed_series": ",".join(d.series_id for d in day.per_entity_detail if d.completed),
            "notes": " | ".join(f"{n.series_name}: {n.text}" for n in day.notes),
        }
        for day in days
    ]
    columns: List[str] = [
        "date", "completed_count", "total_count", "completion_rate", "intensity", "completed_series", "notes",
    ]
    return pd.DataFrame(rows, columns=columns)


class HeatmapExporter:
    """
    Writes heatmap reports to disk as Excel workbooks or CSV tables.
    """

    def __init__(self, output_dir: Optional[Path] = None):
        self.output_dir = Path(output_dir or settings.paths.output_dir)

    def _target(self, report: HeatmapReport, suffix: str, path: Optional[Path]) -> Path:
        if path:
            target = Path(path)
            target.parent.mkdir(parents=True, exist_ok=True)
            return target
        self.output_dir.mkdir(parents=True, exist_ok=True)
        scope = report.series_ids[0] if len(report.series_ids) == 1 else "all"
        safe_scope = scope.replace(" ", "_").replace("/", "-")
        return self.output_dir / f"Cadence_Heatmap_{safe_scope}_{report.year}{suffix}"

    def export_workbook(self, report: HeatmapReport, path: Optional[Path] = None) -> Path:
        target = self._target(report, ".xlsx", path)
        buffer = HeatmapReportBuilder(report).build_report()
        with open(target, "wb") as f:
            f.write(buffer.getvalue())
        return target

    def export_csv(self, report: HeatmapReport, path: Optional[Path] = None) -> Path:
        target = self._target(report, ".csv", path)
        days_frame(report.days).to_csv(target, index=False)
        return target

    def export(self, report: HeatmapReport, path: Optional[Path] = None) -> Path:
        """Picks the format from the path suffix; workbooks by default."""
        if path and Path(path).suffix.lower() == ".csv":
            return self.export_csv(report, path)
        return self.export_workbook(report, path)
