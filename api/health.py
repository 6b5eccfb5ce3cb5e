"""Health check endpoint."""

from http.server import BaseHTTPRequestHandler
import json

from src.utils.config import SyncConfig


def health_status() -> tuple[int, dict]:
    """Service status; degraded when the database credentials are missing."""
    database_configured = bool(SyncConfig.SUPABASE_URL and SyncConfig.SUPABASE_SERVICE_ROLE_KEY)
    payload = {
        "status": "ok" if database_configured else "degraded",
        "service": "work-schedule-sync",
        "checks": {
            "database_configured": database_configured,
            "cache_enabled": SyncConfig.SCHEDULE_CACHE_ENABLED,
        },
    }
    return (200 if database_configured else 503), payload


class handler(BaseHTTPRequestHandler):
    """Health check handler for Vercel serverless function."""

    def do_GET(self):
        status_code, payload = health_status()
        self.send_response(status_code)
        self.send_header('Content-Type', 'application/json')
        self.end_headers()
        self.wfile.write(json.dumps(payload).encode('utf-8'))

    def do_POST(self):
        """Same as GET."""
        self.do_GET()
