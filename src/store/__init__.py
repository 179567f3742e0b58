"""
Entity store backends and the factory that picks one from settings.
"""
import logging

from store.base import EntityStore, RobotFilter
from store.memory import InMemoryStore
from store.supabase import SupabaseStore

logger = logging.getLogger(__name__)


def create_store() -> EntityStore:
    """Build the store selected by STORE_BACKEND (constructed once per process)."""
    from config import settings

    if settings.STORE_BACKEND == "supabase":
        logger.info("Using Supabase store at %s", settings.SUPABASE_URL)
        return SupabaseStore.from_settings()

    if settings.SEED_FILE is not None:
        return InMemoryStore.from_json_file(settings.SEED_FILE)

    logger.info("Using empty in-memory store")
    return InMemoryStore()


__all__ = ["EntityStore", "RobotFilter", "InMemoryStore", "SupabaseStore", "create_store"]
