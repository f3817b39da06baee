"""
CSV Storage Module
"""
from .csv_store import CsvTableStore

__all__ = ["CsvTableStore"]
