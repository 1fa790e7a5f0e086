import os
from dotenv import load_dotenv

load_dotenv()

SUPABASE_URL = os.getenv("SUPABASE_URL") or os.getenv("NEXT_PUBLIC_SUPABASE_URL")
SUPABASE_KEY = (
    os.getenv("SUPABASE_SERVICE_ROLE_KEY")
    or os.getenv("SUPABASE_SERVICE_KEY")
    or os.getenv("SUPABASE_ANON_KEY")
    or os.getenv("NEXT_PUBLIC_SUPABASE_ANON_KEY")
)

USERS_TABLE = os.getenv("MEETMATCH_USERS_TABLE", "users")
ACTIVITIES_TABLE = os.getenv("MEETMATCH_ACTIVITIES_TABLE", "activities")
ACTIVE_STATUS = os.getenv("MEETMATCH_ACTIVE_STATUS", "active")


def require_supabase_credentials() -> tuple[str, str]:
    """Return (url, key) or fail fast naming what is missing."""
    missing = []
    if not SUPABASE_URL:
        missing.append("SUPABASE_URL")
    if not SUPABASE_KEY:
        missing.append("SUPABASE_SERVICE_ROLE_KEY")
    if missing:
        raise EnvironmentError(
            f"Missing required environment variables: {', '.join(missing)}. "
            "Copy .env.example to .env and fill in your Supabase credentials."
        )
    return SUPABASE_URL, SUPABASE_KEY
