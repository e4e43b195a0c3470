# =============================================================================
# tracker_core/data/__init__.py
# =============================================================================

from tracker_core.data.supabase_client import (
    RemoteResult,
    RemoteStore,
    SupabaseRemoteStore,
    get_supabase_client,
)

__all__ = [
    "RemoteResult",
    "RemoteStore",
    "SupabaseRemoteStore",
    "get_supabase_client",
]
