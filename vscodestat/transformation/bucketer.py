"""
Period Bucketing

Decides which CSV file a day's snapshot belongs to.
"""

from typing import Dict

from vscodestat.models import Snapshot, StatPeriod

# Length of the YYYY-MM-DD prefix kept for each grouping
PREFIX_LENGTHS: Dict[StatPeriod, int] = {
    StatPeriod.YEAR: 4,
    StatPeriod.MONTH: 7,
    StatPeriod.DAY: 10,
}


def bucket_id(date_key: str, period: StatPeriod, postfix: str) -> str:
    """
    Bucket id of a date.

    Examples:
        bucket_id("2024-03-15", StatPeriod.YEAR, "vscodestat")  -> "2024_vscodestat"
        bucket_id("2024-03-15", StatPeriod.MONTH, "vscodestat") -> "2024-03_vscodestat"
        bucket_id("2024-03-15", StatPeriod.DAY, "vscodestat")   -> "2024-03-15_vscodestat"
        bucket_id("2024-03-15", StatPeriod.NONE, "vscodestat")  -> "vscodestat"
    """
    period = StatPeriod.parse(period)
    if period is StatPeriod.NONE:
        return postfix
    if period in PREFIX_LENGTHS:
        return f"{date_key[:PREFIX_LENGTHS[period]]}_{postfix}"
    raise ValueError(f"Unsupported date period: {period}")


def bucket_file(bucket: str) -> str:
    """CSV file name of a bucket"""
    return f"{bucket}.csv"


def group_snapshot(snapshot: Snapshot, period: StatPeriod, postfix: str) -> Dict[str, Snapshot]:
    """Group a snapshot by bucket id; a snapshot always lands in exactly one bucket"""
    return {bucket_id(snapshot.date, period, postfix): snapshot}
