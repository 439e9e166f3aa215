"""Storage infrastructure package."""

from .in_memory_record_store import InMemoryRecordStore, load_seed_records

__all__ = ["InMemoryRecordStore", "load_seed_records"]
