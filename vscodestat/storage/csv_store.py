"""
CSV Table Store

One CSV file per bucket under the output directory. Every cell is read and
written as a string so stored values round-trip unchanged.
"""

import os
from pathlib import Path
import stat
import tempfile
from typing import List, Optional, Union

import polars as pl
import structlog

from vscodestat.exceptions import PersistenceReadError, PersistenceWriteError
from vscodestat.transformation.bucketer import bucket_file

logger = structlog.get_logger(__name__)


def current_umask() -> int:
    mask = os.umask(0)
    os.umask(mask)
    return mask


class CsvTableStore:
    """
    Reads and writes bucket tables.

    Example:
        store = CsvTableStore("stats")
        rows = store.read_rows("2024_vscodestat")
        store.write_rows("2024_vscodestat", header, rows)
    """

    def __init__(self, out_dir: Union[str, Path]):
        self.out_dir = Path(out_dir)
        # os.umask is process wide; read it once, writes run in worker threads
        self._umask = current_umask()

    def ensure_directory(self) -> None:
        """Ensure the output directory exists"""
        try:
            self.out_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise PersistenceWriteError(f"Cannot create {self.out_dir}: {e}") from e

    def path_for(self, bucket: str) -> Path:
        return self.out_dir / bucket_file(bucket)

    def file_mode(self, path: Path) -> int:
        """Mode of a rewritten table: the existing file's, else 0o666 minus the umask"""
        try:
            return stat.S_IMODE(path.stat().st_mode)
        except FileNotFoundError:
            return 0o666 & ~self._umask

    def read_rows(self, bucket: str) -> Optional[pl.DataFrame]:
        """
        Read the stored rows of a bucket.

        Returns:
            All-string DataFrame, or None when the bucket has no file yet

        Raises:
            PersistenceReadError: the file exists but cannot be parsed
        """
        path = self.path_for(bucket)
        if not path.is_file():
            return None

        try:
            df = pl.read_csv(path, infer_schema_length=0)
        except (OSError, pl.exceptions.PolarsError) as e:
            raise PersistenceReadError(f"Cannot read {path}: {e}") from e

        logger.debug("Read stored rows", file=str(path), rows=len(df))
        return df

    def write_rows(self, bucket: str, header: List[str], rows: pl.DataFrame) -> Path:
        """
        Replace the table of a bucket.

        The file is written next to its destination and moved into place,
        so readers see either the previous or the new table.
        """
        path = self.path_for(bucket)
        self.ensure_directory()

        tmp_name = None
        try:
            frame = rows.select(header)
            with tempfile.NamedTemporaryFile(
                dir=self.out_dir,
                prefix=f".{path.name}.",
                suffix=".tmp",
                delete=False,
            ) as tmp:
                tmp_name = tmp.name
                frame.write_csv(tmp)
            os.chmod(tmp_name, self.file_mode(path))
            os.replace(tmp_name, path)
        except (OSError, pl.exceptions.PolarsError) as e:
            if tmp_name and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise PersistenceWriteError(f"Cannot write {path}: {e}") from e

        logger.info("Wrote statistics", file=str(path), rows=len(frame))
        return path
