"""
Core Data Model

Metric schema, grouping periods and the immutable daily snapshot row
shared by the normalizer, bucketer, merger and CSV store.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Optional, Tuple

import polars as pl


# Column order of every persisted table. Changing it requires migrating
# existing CSV files.
STATISTICS_TYPES: Tuple[str, ...] = (
    "downloadCount",
    "install",
    "updateCount",
    "averagerating",
    "ratingcount",
    "weightedRating",
    "trendingdaily",
    "trendingweekly",
    "trendingmonthly",
)

DATE_COLUMN = "date"
EXTENSION_COLUMN = "extension"


class StatPeriod(str, Enum):
    """Grouping of the statistics into CSV files"""
    YEAR = "year"
    MONTH = "month"
    DAY = "day"
    NONE = "none"

    @classmethod
    def parse(cls, value: Any) -> "StatPeriod":
        """Parse a period name case-insensitively; empty/null means no grouping"""
        if isinstance(value, cls):
            return value
        if value is None:
            return cls.NONE
        normalized = str(value).strip().lower()
        if normalized in ("", "null"):
            return cls.NONE
        try:
            return cls(normalized)
        except ValueError:
            allowed = [p.value for p in cls]
            raise ValueError(f"Date period must be one of: {allowed}") from None


def build_header(
    write_extension_name: bool = False,
    schema: Tuple[str, ...] = STATISTICS_TYPES,
) -> List[str]:
    """Column names of a persisted table"""
    header = [DATE_COLUMN]
    if write_extension_name:
        header.append(EXTENSION_COLUMN)
    header.extend(schema)
    return header


def to_cell(value: Any) -> Optional[str]:
    """Render a value the way it is stored in a CSV cell"""
    if value is None:
        return None
    return str(value)


@dataclass(frozen=True)
class Snapshot:
    """One day's statistics for an extension"""
    date: str
    values: Tuple[Any, ...]
    extension_name: Optional[str] = None
    schema: Tuple[str, ...] = field(default=STATISTICS_TYPES, repr=False)

    def __post_init__(self):
        if len(self.values) != len(self.schema):
            raise ValueError(
                f"Snapshot has {len(self.values)} values for {len(self.schema)} statistics"
            )

    @property
    def header(self) -> List[str]:
        return build_header(self.extension_name is not None, self.schema)

    def to_record(self) -> List[Any]:
        record: List[Any] = [self.date]
        if self.extension_name is not None:
            record.append(self.extension_name)
        record.extend(self.values)
        return record

    def to_frame(self) -> pl.DataFrame:
        """Single-row frame with every column stored as a string"""
        header = self.header
        return pl.DataFrame(
            [[to_cell(v) for v in self.to_record()]],
            schema={column: pl.Utf8 for column in header},
            orient="row",
        )


@dataclass(frozen=True)
class StatConfig:
    """Immutable collection options passed into every cycle"""
    date_period: StatPeriod = StatPeriod.YEAR
    write_extension_name: bool = False
    merge_stored_data: bool = True
    file_postfix: str = "vscodestat"

    def __post_init__(self):
        object.__setattr__(self, "date_period", StatPeriod.parse(self.date_period))
