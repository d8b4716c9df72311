"""
Service providers for FastAPI `Depends`.

Each service is created once per process. Tests swap them through
`app.dependency_overrides`.
"""
from functools import lru_cache

from tvqueue.config import get_settings
from tvqueue.services.room_service import RoomService
from tvqueue.services.supabase_service import SupabaseService
from tvqueue.services.sync_handler import SyncProtocolHandler
from tvqueue.services.websocket_manager import ConnectionRegistry
from tvqueue.services.youtube_service import YouTubeService


@lru_cache()
def get_storage() -> SupabaseService:
    settings = get_settings()
    return SupabaseService(settings.supabase_url, settings.supabase_key)


@lru_cache()
def get_connection_registry() -> ConnectionRegistry:
    return ConnectionRegistry()


@lru_cache()
def get_room_service() -> RoomService:
    # Singleton: the per-room locks only work if every caller shares them
    return RoomService(get_storage(), get_connection_registry())


@lru_cache()
def get_sync_handler() -> SyncProtocolHandler:
    return SyncProtocolHandler(get_room_service(), get_connection_registry())


@lru_cache()
def get_youtube_service() -> YouTubeService:
    settings = get_settings()
    return YouTubeService(
        api_keys=settings.youtube_api_keys,
        keyword=settings.search_keyword,
        max_results=settings.search_max_results,
        timeout=settings.search_timeout_seconds,
    )
