from fastapi import APIRouter, Depends, HTTPException, Query
from tvqueue.core.exceptions import UpstreamError
from tvqueue.core.logging import get_logger
from tvqueue.dependencies import get_youtube_service
from tvqueue.schemas.search import VideoSearchResult
from tvqueue.services.youtube_service import YouTubeService

logger = get_logger("api.search")
router = APIRouter()


@router.get("/search", response_model=list[VideoSearchResult])
async def search_videos(
    q: str = Query(default=""),
    youtube_service: YouTubeService = Depends(get_youtube_service),
):
    """Search karaoke videos for the mobile search screen"""
    if not q.strip():
        raise HTTPException(status_code=400, detail="Search query required")

    try:
        return await youtube_service.search(q)
    except UpstreamError as e:
        raise HTTPException(status_code=500, detail=e.message)
    except Exception as e:
        logger.error(f"Search failed for '{q}': {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to search YouTube")
