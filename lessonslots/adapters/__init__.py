"""
Adapters layer - External integrations (JSON data file, Supabase, keyring).
"""

from .credentials import CredentialStore
from .json_store import JsonDataStore
from .supabase_client import SupabaseClient

__all__ = ["CredentialStore", "JsonDataStore", "SupabaseClient"]
