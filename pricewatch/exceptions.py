"""
Exception hierarchy for the price catalog.

Every error carries an optional ``context`` dict so callers can log
structured metadata without parsing the message.
"""

from typing import Any, Dict, Optional


class PricewatchError(Exception):
    """Base exception for all catalog errors"""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.context = context or {}


class SourceReadError(PricewatchError):
    """
    A CSV source could not be read or downloaded.

    Policy: log and skip the file. Do not abort the ETL batch.

    Context keys:
        key: str - the source path or blob key
    """


class CsvParseError(PricewatchError):
    """
    A CSV source could not be parsed into records.

    Policy: log and skip the file. Do not abort the ETL batch.

    Context keys:
        key: str - the source path or blob key (when known)
        reason: str - parser message
    """


class StorageError(PricewatchError):
    """
    Persisting the catalog or a manual dataset failed.

    Policy: report to the caller. Previously persisted state stays intact.

    Context keys:
        path: str - the target file
    """
