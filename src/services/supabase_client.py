"""Supabase client wrapper with async context manager support."""

from typing import Optional
from supabase import create_client, Client
from supabase.client import ClientOptions
from src.utils.config import SyncConfig
from src.utils.errors import PersistenceError
import logging

logger = logging.getLogger(__name__)

# Global client instance (singleton pattern)
_client: Optional[Client] = None


def get_supabase_client() -> Client:
    """Get or create Supabase client singleton."""
    global _client
    
    if _client is None:
        url = SyncConfig.SUPABASE_URL
        key = SyncConfig.SUPABASE_SERVICE_ROLE_KEY
        
        if not url or not key:
            raise PersistenceError("SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY must be set")
        
        # Service role client; no user session to persist
        options = ClientOptions(
            auto_refresh_token=False,
            persist_session=False,
        )
        
        _client = create_client(url, key, options)
        logger.info("Supabase client initialized", extra={"url": url})
    
    return _client


class SupabaseClient:
    """Async context manager for Supabase client."""
    
    def __init__(self):
        self.client: Optional[Client] = None
    
    async def __aenter__(self) -> Client:
        """Enter async context."""
        self.client = get_supabase_client()
        return self.client
    
    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Exit async context."""
        if exc_type:
            logger.error(
                "Supabase operation error",
                extra={"error": str(exc_val), "type": exc_type.__name__}
            )
        return False


# Works table operations
async def get_work(work_id: int) -> Optional[dict]:
    """Get a work by ID."""
    async with SupabaseClient() as client:
        try:
            result = client.table(SyncConfig.WORKS_TABLE).select("*").eq("id", work_id).limit(1).execute()
            return result.data[0] if result.data and len(result.data) > 0 else None
        except Exception as e:
            raise PersistenceError(f"Failed to get work: {e}", work_id=work_id)


async def update_work(work_id: int, updates: dict) -> Optional[dict]:
    """Update a work. Returns None when no row matched."""
    async with SupabaseClient() as client:
        try:
            result = client.table(SyncConfig.WORKS_TABLE).update(updates).eq("id", work_id).execute()
            return result.data[0] if result.data and len(result.data) > 0 else None
        except Exception as e:
            raise PersistenceError(f"Failed to update work: {e}", work_id=work_id)


async def get_works_with_schedule() -> list[dict]:
    """Get every work that has a saved schedule."""
    async with SupabaseClient() as client:
        try:
            result = (
                client.table(SyncConfig.WORKS_TABLE)
                .select("id, scheme_sr_no, work_name, schedule_data")
                .not_.is_("schedule_data", "null")
                .order("id")
                .execute()
            )
            return result.data if result.data else []
        except Exception as e:
            raise PersistenceError(f"Failed to get works with schedule: {e}")


# Work activities table operations
async def get_activities_by_work(work_id: int) -> list[dict]:
    """Get all activities for a work in display order."""
    async with SupabaseClient() as client:
        try:
            result = (
                client.table(SyncConfig.ACTIVITIES_TABLE)
                .select("*")
                .eq("work_id", work_id)
                .order("display_order")
                .execute()
            )
            return result.data if result.data else []
        except Exception as e:
            raise PersistenceError(f"Failed to get activities: {e}", work_id=work_id)


async def get_activity(activity_id: int) -> Optional[dict]:
    """Get an activity by ID."""
    async with SupabaseClient() as client:
        try:
            result = client.table(SyncConfig.ACTIVITIES_TABLE).select("*").eq("id", activity_id).limit(1).execute()
            return result.data[0] if result.data and len(result.data) > 0 else None
        except Exception as e:
            raise PersistenceError(f"Failed to get activity: {e}")


async def check_activities_exist(work_id: int) -> bool:
    """Check whether a work has any activity rows."""
    async with SupabaseClient() as client:
        try:
            result = client.table(SyncConfig.ACTIVITIES_TABLE).select("id").eq("work_id", work_id).limit(1).execute()
            return bool(result.data)
        except Exception as e:
            raise PersistenceError(f"Failed to check activities: {e}", work_id=work_id)


async def insert_activities(rows: list[dict]) -> list[dict]:
    """Insert activity rows and return them with their assigned IDs."""
    if not rows:
        return []
    async with SupabaseClient() as client:
        try:
            result = client.table(SyncConfig.ACTIVITIES_TABLE).insert(rows).execute()
            if result.data and len(result.data) > 0:
                return result.data
            raise PersistenceError("Failed to insert activities: no data returned")
        except PersistenceError:
            raise
        except Exception as e:
            raise PersistenceError(f"Failed to insert activities: {e}")


async def update_activity(activity_id: int, updates: dict) -> Optional[dict]:
    """Update an activity. Returns None when no row matched."""
    async with SupabaseClient() as client:
        try:
            result = client.table(SyncConfig.ACTIVITIES_TABLE).update(updates).eq("id", activity_id).execute()
            return result.data[0] if result.data and len(result.data) > 0 else None
        except Exception as e:
            raise PersistenceError(f"Failed to update activity: {e}")


async def delete_activities_by_work(work_id: int) -> None:
    """Delete every activity of a work."""
    async with SupabaseClient() as client:
        try:
            client.table(SyncConfig.ACTIVITIES_TABLE).delete().eq("work_id", work_id).execute()
        except Exception as e:
            raise PersistenceError(f"Failed to delete activities: {e}", work_id=work_id)
