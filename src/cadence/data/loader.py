"""
Reads record-store snapshots from disk.

Supported layouts:
- JSON / YAML document: ``{"habits": [...], "bad_habits": [...]}`` or a plain
  list of series each carrying ``kind`` ("completion" or "count").
- CSV: one row per record with ``series_id`` and ``date`` columns plus any of
  ``name, kind, completed, value, notes, color, category, frequency, is_active,
  target_reduction``.

Every record is validated before it reaches the engine. The first malformed
record stops the load with an ``InvalidInputError`` naming its series or row.
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import pandas as pd
import yaml
from pydantic import ValidationError

from cadence.domain.models import AnySeries, CompletionRecord, CompletionSeries, CountRecord, CountSeries
from cadence.exceptions import DataSourceError, InvalidInputError

logger = logging.getLogger(__name__)

COMPLETION = "completion"
COUNT = "count"

_DOCUMENT_KEYS = {"habits": COMPLETION, "bad_habits": COUNT}
_SERIES_COLUMNS = ("name", "color", "category", "frequency", "is_active", "target_reduction")
_REQUIRED_COLUMNS = {"series_id", "date"}


@dataclass
class SeriesSnapshot:
    completion: List[CompletionSeries] = field(default_factory=list)
    count: List[CountSeries] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.completion) + len(self.count)


def _describe(exc: ValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()))
        parts.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
    return "; ".join(parts)


def parse_series(raw: Dict[str, Any], kind: Optional[str] = None) -> AnySeries:
    """Validates one series mapping into a CompletionSeries or CountSeries."""
    if not isinstance(raw, dict):
        raise InvalidInputError(f"Series entry must be a mapping, got {type(raw).__name__}")
    data = dict(raw)
    series_kind = kind or data.get("kind") or COMPLETION
    data["kind"] = series_kind

    if series_kind == COUNT:
        # Older exports store the tally under "count"
        data["records"] = [
            {**r, "value": r["count"]} if isinstance(r, dict) and "value" not in r and "count" in r else r
            for r in data.get("records") or []
        ]
        model = CountSeries
    elif series_kind == COMPLETION:
        model = CompletionSeries
    else:
        raise InvalidInputError(f"Unknown series kind {series_kind!r} for series {data.get('id')!r}")

    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise InvalidInputError(f"Invalid series {data.get('id')!r}: {_describe(e)}")


def _from_document(document: Any) -> SeriesSnapshot:
    snapshot = SeriesSnapshot()
    if isinstance(document, dict):
        entries = [
            (item, kind)
            for key, kind in _DOCUMENT_KEYS.items()
            for item in (document.get(key) or [])
        ]
    elif isinstance(document, list):
        entries = [(item, None) for item in document]
    else:
        raise DataSourceError("Snapshot document must be a mapping or a list of series")

    for item, kind in entries:
        series = parse_series(item, kind)
        if isinstance(series, CountSeries):
            snapshot.count.append(series)
        else:
            snapshot.completion.append(series)
    return snapshot


def _row_record(row: Dict[str, str], kind: str, row_num: int):
    payload: Dict[str, Any] = {"date": row.get("date", "")}
    notes = (row.get("notes") or "").strip()
    if notes:
        payload["notes"] = notes
    try:
        if kind == COUNT:
            value = (row.get("value") or "").strip()
            if value:
                payload["value"] = value
            return CountRecord.model_validate(payload)
        completed = (row.get("completed") or "").strip()
        payload["is_completed"] = completed or False
        return CompletionRecord.model_validate(payload)
    except ValidationError as e:
        raise InvalidInputError(f"Row {row_num} ({row.get('series_id')!r}): {_describe(e)}")


def _from_frame(df: pd.DataFrame, default_kind: Optional[str]) -> SeriesSnapshot:
    missing = _REQUIRED_COLUMNS - set(df.columns)
    if missing:
        raise DataSourceError(f"CSV is missing required columns: {sorted(missing)}")

    grouped: Dict[str, Dict[str, Any]] = {}
    for position, row in enumerate(df.to_dict(orient="records")):
        row_num = position + 2  # header is line 1
        series_id = (row.get("series_id") or "").strip()
        if not series_id:
            raise InvalidInputError(f"Row {row_num}: series_id cannot be empty")

        entry = grouped.get(series_id)
        if entry is None:
            kind = (row.get("kind") or "").strip() or default_kind or COMPLETION
            if kind not in (COMPLETION, COUNT):
                raise InvalidInputError(f"Row {row_num}: unknown series kind {kind!r}")
            entry = {"id": series_id, "kind": kind, "records": []}
            for column in _SERIES_COLUMNS:
                value = (row.get(column) or "").strip()
                if value:
                    entry[column] = value
            grouped[series_id] = entry

        entry["records"].append(_row_record(row, entry["kind"], row_num))

    return _from_document([
        {**entry, "records": [r.model_dump() for r in entry["records"]]}
        for entry in grouped.values()
    ])


def load_series(file_path: Path, kind: Optional[str] = None) -> SeriesSnapshot:
    """
    Loads a snapshot file. ``kind`` forces the series kind for inputs that do
    not carry one (CSV without a ``kind`` column, plain lists).
    """
    file_path = Path(file_path)
    logger.info(f"Loading series from {file_path}")
    if not file_path.exists():
        logger.error(f"Input file not found: {file_path}")
        raise DataSourceError(f"Input file not found: {file_path}")

    suffix = file_path.suffix.lower()
    try:
        if suffix == ".csv":
            df = pd.read_csv(file_path, dtype=str, keep_default_na=False)
            snapshot = _from_frame(df, kind)
        elif suffix == ".json":
            with open(file_path, "r", encoding="utf-8") as f:
                document = json.load(f)
            snapshot = _apply_kind(document, kind)
        elif suffix in (".yaml", ".yml"):
            with open(file_path, "r", encoding="utf-8") as f:
                document = yaml.safe_load(f)
            snapshot = _apply_kind(document, kind)
        else:
            raise DataSourceError(f"Unsupported snapshot format: {suffix or file_path.name}")
    except (json.JSONDecodeError, yaml.YAMLError, pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as e:
        raise DataSourceError(f"Failed to parse {file_path}: {e}")

    logger.info(
        f"Loaded {len(snapshot.completion)} habit series and {len(snapshot.count)} count series from {file_path.name}"
    )
    return snapshot


def _apply_kind(document: Any, kind: Optional[str]) -> SeriesSnapshot:
    if kind and isinstance(document, list):
        document = [{**item, "kind": kind} if isinstance(item, dict) else item for item in document]
    return _from_document(document)
