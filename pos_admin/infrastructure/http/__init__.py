"""HTTP infrastructure package."""

from .http_record_repository import HttpRecordRepository

__all__ = ["HttpRecordRepository"]
