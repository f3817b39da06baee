"""
Snapshot Transformation Module
"""
from .bucketer import bucket_file, bucket_id, group_snapshot
from .merger import load_history, merge_history
from .normalizer import normalize_snapshot, parse_statistics, today_key

__all__ = [
    "bucket_file",
    "bucket_id",
    "group_snapshot",
    "load_history",
    "merge_history",
    "normalize_snapshot",
    "parse_statistics",
    "today_key",
]
