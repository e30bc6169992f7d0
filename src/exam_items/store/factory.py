"""Record store factory."""

from typing import Tuple

from ..config.settings import Settings
from .base import RecordStore
from .local import LocalRecordStore
from .supabase import SupabaseClientManager, SupabaseRecordStore

ITEM_KIND = "ExamItem"
RESPONSE_KIND = "Response"


def create_stores(settings: Settings) -> Tuple[RecordStore, RecordStore]:
    """Create the exam item and response stores.

    Args:
        settings: Application settings

    Returns:
        Tuple of (item_store, response_store)

    Raises:
        ValueError: If the backend is unknown or Supabase is not configured
    """
    backend = settings.storage.backend.lower()

    if backend == "local":
        data_path = settings.storage.data_path
        return (
            LocalRecordStore(data_path, "exam_items.json", ITEM_KIND),
            LocalRecordStore(data_path, "responses.json", RESPONSE_KIND),
        )

    if backend != "supabase":
        raise ValueError(f"Unknown storage backend: {settings.storage.backend}")

    if not settings.supabase.is_configured:
        raise ValueError(
            "SUPABASE_URL and SUPABASE_KEY must be set in environment"
        )

    client_manager = SupabaseClientManager(
        settings.supabase.url,
        settings.supabase.key,
    )
    return (
        SupabaseRecordStore(client_manager, settings.supabase.items_table, ITEM_KIND),
        SupabaseRecordStore(client_manager, settings.supabase.responses_table, RESPONSE_KIND),
    )
