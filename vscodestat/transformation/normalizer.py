"""
Snapshot Normalization

Maps the statistics reported by vsce onto the fixed metric schema.
"""

from datetime import date
from typing import Any, Dict, Mapping, Optional, Tuple

import structlog

from vscodestat.exceptions import MalformedSourceOutput
from vscodestat.models import STATISTICS_TYPES, Snapshot

logger = structlog.get_logger(__name__)


def today_key(today: Optional[date] = None) -> str:
    """Local calendar date as YYYY-MM-DD"""
    return (today or date.today()).isoformat()


def parse_statistics(payload: Any) -> Dict[str, Any]:
    """
    Extract statistic values from `vsce show --json` output.

    Args:
        payload: Decoded JSON, expected to carry a "statistics" list of
            {"statisticName": ..., "value": ...} objects

    Returns:
        Mapping of statistic name to value

    Raises:
        MalformedSourceOutput: payload does not have the expected structure
    """
    if not isinstance(payload, dict):
        raise MalformedSourceOutput(
            f"Expected a JSON object, got {type(payload).__name__}"
        )

    statistics = payload.get("statistics")
    if not isinstance(statistics, list):
        raise MalformedSourceOutput("Missing or invalid 'statistics' list")

    values: Dict[str, Any] = {}
    for stat in statistics:
        if not isinstance(stat, dict) or not isinstance(stat.get("statisticName"), str):
            raise MalformedSourceOutput(f"Invalid statistic entry: {stat!r}")
        values[stat["statisticName"]] = stat.get("value")

    return values


def normalize_snapshot(
    statistics: Mapping[str, Any],
    date_key: str,
    extension_name: Optional[str] = None,
    schema: Tuple[str, ...] = STATISTICS_TYPES,
) -> Snapshot:
    """
    Build the snapshot row of a day.

    Statistics missing from this cycle are left empty; names outside the
    schema are ignored. Passing `extension_name` adds the extension column.
    """
    unknown = sorted(set(statistics) - set(schema))
    if unknown:
        logger.debug("Ignoring unknown statistics", names=unknown)

    return Snapshot(
        date=date_key,
        values=tuple(statistics.get(name) for name in schema),
        extension_name=extension_name,
        schema=schema,
    )
