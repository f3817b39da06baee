"""
Test Suite Configuration
"""
from datetime import date
from typing import Any, List

import polars as pl
import pytest

from vscodestat.config import Settings
from vscodestat.models import STATISTICS_TYPES, build_header


class FakeSource:
    """Stands in for VsceStatSource; returns queued payloads"""

    def __init__(self, *payloads: Any):
        self.payloads: List[Any] = list(payloads)
        self.calls = 0

    async def fetch(self) -> Any:
        self.calls += 1
        payload = self.payloads.pop(0) if len(self.payloads) > 1 else self.payloads[0]
        if isinstance(payload, Exception):
            raise payload
        return payload


def make_payload(**values) -> dict:
    """vsce show --json output carrying the given statistics"""
    return {
        "publisher": {"publisherName": "vizzuhq"},
        "extensionName": "code-viz-stat",
        "statistics": [
            {"statisticName": name, "value": value}
            for name, value in values.items()
        ],
    }


def make_rows(dates: List[str], value: str = "1", extension: str = None) -> pl.DataFrame:
    """Stored table with one row per date"""
    header = build_header(extension is not None)
    rows = []
    for day in dates:
        row = [day]
        if extension is not None:
            row.append(extension)
        row.extend([value] * len(STATISTICS_TYPES))
        rows.append(row)
    return pl.DataFrame(rows, schema={c: pl.Utf8 for c in header}, orient="row")


@pytest.fixture
def test_settings() -> Settings:
    """Create test settings"""
    return Settings(app_env="testing")


@pytest.fixture
def sample_payload() -> dict:
    return make_payload(
        install=1520,
        averagerating=4.5,
        ratingcount=12,
        trendingdaily=0.8,
        downloadCount=37,
        updateCount=4210,
        weightedRating=4.41,
        trendingweekly=2.25,
        trendingmonthly=9.6,
    )


@pytest.fixture
def fake_source(sample_payload) -> FakeSource:
    return FakeSource(sample_payload)


@pytest.fixture
def fixed_today():
    return lambda: date(2024, 1, 2)
