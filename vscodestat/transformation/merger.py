"""
History Merging

Reconciles a freshly fetched snapshot with the rows already stored for its
bucket. The merged table never holds two rows for the same date and is
always sorted by date: stored rows dated on or after the snapshot are
superseded by it.
"""

import asyncio
from typing import List, Optional

import polars as pl
import structlog

from vscodestat.exceptions import PersistenceReadError
from vscodestat.models import DATE_COLUMN, Snapshot

logger = structlog.get_logger(__name__)


def conform_columns(df: pl.DataFrame, header: List[str]) -> pl.DataFrame:
    """Select `header` columns as strings; missing ones become null"""
    return df.select([
        pl.col(column).cast(pl.Utf8) if column in df.columns
        else pl.lit(None, dtype=pl.Utf8).alias(column)
        for column in header
    ])


def merge_history(
    new_row: Snapshot,
    prior_rows: Optional[pl.DataFrame],
    merge_stored_data: bool = True,
) -> pl.DataFrame:
    """
    Merge a snapshot into the stored rows of its bucket.

    Args:
        new_row: Today's snapshot
        prior_rows: Rows previously stored for the same bucket, if any
        merge_stored_data: When False the stored rows are discarded and
            the bucket is overwritten with the snapshot alone

    Returns:
        Rows to persist, ascending by date with unique dates
    """
    new_frame = new_row.to_frame()

    if not merge_stored_data or prior_rows is None or prior_rows.is_empty():
        return new_frame

    if DATE_COLUMN not in prior_rows.columns:
        logger.warning(
            "Stored rows have no date column, discarding them",
            columns=prior_rows.columns,
        )
        return new_frame

    kept = (
        conform_columns(prior_rows, new_row.header)
        .filter(pl.col(DATE_COLUMN) < new_row.date)
        .unique(subset=[DATE_COLUMN], keep="last", maintain_order=True)
        .sort(DATE_COLUMN)
    )

    superseded = len(prior_rows) - len(kept)
    if superseded:
        logger.info(
            "Superseded stored rows",
            date=new_row.date,
            rows=superseded,
        )

    return pl.concat([kept, new_frame], how="vertical")


async def load_history(store, bucket: str) -> Optional[pl.DataFrame]:
    """
    Read the stored rows of a bucket.

    A missing or unreadable file means there is no history.
    """
    try:
        return await asyncio.to_thread(store.read_rows, bucket)
    except PersistenceReadError as e:
        logger.warning(
            "Could not read stored rows, continuing without history",
            bucket=bucket,
            error=str(e),
        )
        return None
