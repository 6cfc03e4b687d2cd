from .memory_store import MemoryRecordStore
from .store import RecordStore, find_batch_duplicates, sort_records

__all__ = [
    "MemoryRecordStore",
    "RecordStore",
    "find_batch_duplicates",
    "sort_records",
]
