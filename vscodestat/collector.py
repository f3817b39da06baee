"""
Statistics Collector

Collects the daily Marketplace statistics of an extension, groups them by
date period and merges them into the CSV files of the output directory.

Only one collector may write to an output directory at a time; concurrent
runs against the same directory are not guarded.
"""

import asyncio
from datetime import date
from pathlib import Path
from typing import Callable, Dict, Iterable, Optional, Union

import polars as pl
import structlog

from vscodestat.exceptions import ConfigurationError
from vscodestat.ingestion.source import RetryPolicy, VsceStatSource
from vscodestat.models import Snapshot, StatConfig
from vscodestat.storage.csv_store import CsvTableStore
from vscodestat.transformation.bucketer import bucket_file, group_snapshot
from vscodestat.transformation.merger import load_history, merge_history
from vscodestat.transformation.normalizer import (
    normalize_snapshot,
    parse_statistics,
    today_key,
)

logger = structlog.get_logger(__name__)


def extension_postfixes(extension_names: Iterable[str], postfix: str) -> Dict[str, str]:
    """
    File postfix of each extension collected into one output directory.

    A single extension keeps the postfix; with several, every extension gets
    its own files (`{extension}_{postfix}`) so their rows for the same day
    never replace each other.
    """
    names = list(dict.fromkeys(extension_names))
    if len(names) == 1:
        return {names[0]: postfix}
    return {name: f"{name}_{postfix}" for name in names}


class VscodeStatCollector:
    """
    Collects, filters and saves VS Code extension statistics.

    Example:
        collector = VscodeStatCollector(
            "publisher.extension",
            out_dir="stats",
            config=StatConfig(date_period=StatPeriod.MONTH),
        )
        merged = await collector.write_stats()
    """

    def __init__(
        self,
        extension_name: str,
        out_dir: Optional[Union[str, Path]] = None,
        config: Optional[StatConfig] = None,
        source: Optional[VsceStatSource] = None,
        store: Optional[CsvTableStore] = None,
        today: Optional[Callable[[], date]] = None,
    ):
        if not extension_name:
            raise ConfigurationError("extension_name is a required argument")

        self.extension_name = extension_name
        self.out_dir = Path(out_dir) if out_dir else None
        self.config = config or StatConfig()
        self.source = source or VsceStatSource(extension_name)
        self.store = store or (CsvTableStore(self.out_dir) if self.out_dir else None)
        self._today = today or date.today

    @classmethod
    def from_settings(
        cls,
        settings,
        extension_name: Optional[str] = None,
        out_dir: Optional[Union[str, Path]] = None,
    ) -> "VscodeStatCollector":
        """Create a collector from application settings"""
        name = extension_name or settings.collector.extension_name
        fetch = settings.fetch
        source = None
        if name:
            source = VsceStatSource(
                name,
                command=fetch.command_args,
                retry=RetryPolicy(
                    max_attempts=fetch.max_attempts,
                    backoff_seconds=fetch.backoff_seconds,
                    backoff_multiplier=fetch.backoff_multiplier,
                    max_backoff_seconds=fetch.max_backoff_seconds,
                ),
                timeout_seconds=fetch.timeout_seconds,
                fail_on_stderr=fetch.fail_on_stderr,
            )
        return cls(
            name,
            out_dir=out_dir or settings.collector.out_dir,
            config=settings.collector.to_config(),
            source=source,
        )

    async def get_stats(self) -> Snapshot:
        """
        Fetch the statistics of today.

        Raises:
            SourceFetchError: vsce could not be run successfully
            MalformedSourceOutput: vsce output could not be parsed
        """
        payload = await self.source.fetch()
        statistics = parse_statistics(payload)
        snapshot = normalize_snapshot(
            statistics,
            today_key(self._today()),
            extension_name=self.extension_name if self.config.write_extension_name else None,
        )
        logger.info(
            "Collected statistics",
            extension=self.extension_name,
            date=snapshot.date,
        )
        return snapshot

    async def write_stats(self, postfix: Optional[str] = None) -> Dict[str, pl.DataFrame]:
        """
        Collect today's statistics and merge them into the stored files.

        Args:
            postfix: Postfix of the CSV file names, defaults to the configured one

        Returns:
            Merged rows keyed by CSV file name
        """
        postfix = postfix or self.config.file_postfix
        snapshot = await self.get_stats()
        grouped = group_snapshot(snapshot, self.config.date_period, postfix)

        histories: Dict[str, Optional[pl.DataFrame]] = {bucket: None for bucket in grouped}
        if self.store is not None and self.config.merge_stored_data:
            loaded = await asyncio.gather(
                *(load_history(self.store, bucket) for bucket in grouped)
            )
            histories = dict(zip(grouped, loaded))

        merged = {
            bucket: merge_history(row, histories[bucket], self.config.merge_stored_data)
            for bucket, row in grouped.items()
        }

        if self.store is None:
            logger.info("No output directory, skipping write", extension=self.extension_name)
        else:
            self.store.ensure_directory()
            for bucket, rows in merged.items():
                await asyncio.to_thread(
                    self.store.write_rows, bucket, grouped[bucket].header, rows
                )

        return {bucket_file(bucket): rows for bucket, rows in merged.items()}
