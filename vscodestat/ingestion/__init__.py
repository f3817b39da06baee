"""
Statistics Ingestion Module
"""
from .source import RetryPolicy, VsceStatSource

__all__ = [
    "RetryPolicy",
    "VsceStatSource",
]
