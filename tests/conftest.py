import json
from datetime import date, timedelta

import pytest

AS_OF = date(2024, 6, 15)  # a Saturday


@pytest.fixture
def as_of():
    return AS_OF


@pytest.fixture
def snapshot_file(tmp_path):
    """
    JSON snapshot with two habits to build and one habit to reduce.
    """
    document = {
        "habits": [
            {
                "id": "h-read",
                "name": "Read",
                "color": "#22c55e",
                "category": "learning",
                "records": [
                    {"date": (AS_OF - timedelta(days=i)).isoformat(), "is_completed": True}
                    for i in range(3)
                ],
            },
            {
                "id": "h-run",
                "name": "Run",
                "category": "fitness",
                "is_active": False,
                "records": [{"date": AS_OF.isoformat(), "is_completed": True, "notes": "5k"}],
            },
        ],
        "bad_habits": [
            {
                "id": "b-coffee",
                "name": "Coffee",
                "category": "coffee",
                "records": [
                    {"date": (AS_OF - timedelta(days=i)).isoformat(), "count": 2 if i < 7 else 5}
                    for i in range(14)
                ],
            }
        ],
    }
    path = tmp_path / "snapshot.json"
    path.write_text(json.dumps(document), encoding="utf-8")
    return path
