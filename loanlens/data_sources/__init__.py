"""
Reference data source module
"""

from .reference_store import (
    ReferenceDataStore,
    InMemoryReferenceStore,
    JsonReferenceStore,
    get_reference_store,
)
from .supabase_store import SupabaseReferenceStore

__all__ = [
    "ReferenceDataStore",
    "InMemoryReferenceStore",
    "JsonReferenceStore",
    "SupabaseReferenceStore",
    "get_reference_store",
]
