"""
Application settings and configuration.
"""
import os
import sys
from pathlib import Path
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

AVAILABLE_BACKENDS = ["memory", "supabase"]


def validate_supabase_url(value: str) -> bool:
    """
    Validate the Supabase project URL format.

    Args:
        value: URL from SUPABASE_URL

    Returns:
        True if format is valid, False otherwise
    """
    return value.startswith(("https://", "http://")) and len(value) > len("https://")


def validate_environment():
    """
    Validate required environment variables on startup.

    The in-memory backend needs nothing. The supabase backend needs the
    project URL and the service-role key. Exits with clear error message if
    validation fails.
    """
    backend = os.getenv("STORE_BACKEND", "memory").lower()

    if backend not in AVAILABLE_BACKENDS:
        print("\n" + "=" * 80)
        print("CONFIGURATION ERROR")
        print("=" * 80)
        print(f"\nUnknown STORE_BACKEND '{backend}'.")
        print(f"  Valid values: {', '.join(AVAILABLE_BACKENDS)}")
        print("\n" + "=" * 80 + "\n")
        sys.exit(1)

    if backend != "supabase":
        return

    missing = [
        name for name in ("SUPABASE_URL", "SUPABASE_SERVICE_ROLE_KEY")
        if not os.getenv(name)
    ]
    if missing:
        print("\n" + "=" * 80)
        print("CONFIGURATION ERROR")
        print("=" * 80)
        print("\nMissing required environment variables for STORE_BACKEND=supabase:")
        for name in missing:
            print(f"    - {name}")
        print("\nACTION REQUIRED:")
        print("  1. Create .env file in project root (see .env.example)")
        print("  2. Copy the project URL and service_role key from")
        print("     Supabase dashboard > Project Settings > API")
        print("  3. Restart the application")
        print("\n" + "=" * 80 + "\n")
        sys.exit(1)

    if not validate_supabase_url(os.getenv("SUPABASE_URL")):
        print("\n" + "=" * 80)
        print("CONFIGURATION ERROR")
        print("=" * 80)
        print("\nInvalid SUPABASE_URL: must start with https:// (or http:// for a local stack)")
        print("\n" + "=" * 80 + "\n")
        sys.exit(1)


# Validate environment BEFORE setting any config variables
validate_environment()

# Install log sanitization globally
from security.sanitization import install_log_sanitization
install_log_sanitization()

# Store Configuration (after validation)
STORE_BACKEND = os.getenv("STORE_BACKEND", "memory").lower()
SUPABASE_URL = (os.getenv("SUPABASE_URL") or "").rstrip("/")
SUPABASE_SERVICE_ROLE_KEY = os.getenv("SUPABASE_SERVICE_ROLE_KEY")

# Single request-level timeout applied to every store call
STORE_TIMEOUT = float(os.getenv("STORE_TIMEOUT", "5"))

# Optional JSON file of robot rows loaded into the in-memory store at startup
BASE_DIR = Path(__file__).resolve().parent.parent.parent
_seed = os.getenv("SEED_FILE")
SEED_FILE = (BASE_DIR / _seed) if _seed else None

# Table names in the hosted schema
ROBOTS_TABLE = "robots"
ANALYTICS_TABLE = "comparison_analytics"

# Application Configuration
DEFAULT_HOST = os.getenv("DEFAULT_HOST", "127.0.0.1")
DEFAULT_PORT = int(os.getenv("DEFAULT_PORT", "8000"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Comparison Configuration
DEFAULT_RANDOM_COUNT = 2
MAX_RANDOM_COUNT = int(os.getenv("MAX_RANDOM_COUNT", "20"))
DEFAULT_POPULAR_LIMIT = 10
MAX_POPULAR_LIMIT = int(os.getenv("MAX_POPULAR_LIMIT", "100"))
TOP_OPPONENTS_LIMIT = int(os.getenv("TOP_OPPONENTS_LIMIT", "5"))

# Popular-comparison windows, in days
TIME_RANGE_DAYS = {
    "day": 1,
    "week": 7,
    "month": 30,
}
