"""Service configuration read from environment variables."""

import os


class SyncConfig:
    """Schedule/activity sync configuration."""

    SUPABASE_URL = os.environ.get("SUPABASE_URL")
    SUPABASE_SERVICE_ROLE_KEY = os.environ.get("SUPABASE_SERVICE_ROLE_KEY")
    WORKS_TABLE = os.environ.get("WORKS_TABLE", "works")
    ACTIVITIES_TABLE = os.environ.get("ACTIVITIES_TABLE", "work_activities")
    SCHEDULE_CACHE_TTL_MS = int(os.environ.get("SCHEDULE_CACHE_TTL_MS", "300000"))
    SCHEDULE_CACHE_ENABLED = os.environ.get("SCHEDULE_CACHE_ENABLED", "true").lower() == "true"
