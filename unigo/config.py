"""Application settings read from the environment."""
import os
from typing import List

# Logging
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
IS_HOSTED = os.environ.get("VERCEL") == "1"

# Supabase
SUPABASE_URL = os.environ.get("SUPABASE_URL", "")
SUPABASE_SERVICE_ROLE_KEY = os.environ.get("SUPABASE_SERVICE_ROLE_KEY", "")

# Upstash Redis (cafeteria cart persistence)
UPSTASH_REDIS_REST_URL = os.environ.get("UPSTASH_REDIS_REST_URL", "")
UPSTASH_REDIS_REST_TOKEN = os.environ.get("UPSTASH_REDIS_REST_TOKEN", "")

# Sessions
SESSION_COOKIE_NAME = os.environ.get("UNIGO_SESSION_COOKIE", "unigo_session")
SESSION_TTL_HOURS = int(os.environ.get("UNIGO_SESSION_TTL_HOURS", "24"))

# Where clients are sent when a signed-in user is required
LOGIN_PATH = os.environ.get("UNIGO_LOGIN_PATH", "/auth/login")

# Pickup scheduling (minutes ahead of "now")
INSTANT_PICKUP_MINUTES = 1
LATER_PICKUP_MINUTES = 30
PICKUP_WINDOW_MINUTES = 30


def get_cors_origins() -> List[str]:
    """Comma separated UNIGO_CORS_ORIGINS, defaulting to all origins."""
    raw = os.environ.get("UNIGO_CORS_ORIGINS", "*")
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


def redis_configured() -> bool:
    return bool(UPSTASH_REDIS_REST_URL and UPSTASH_REDIS_REST_TOKEN)
