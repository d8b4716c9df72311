import re
from typing import Any, Dict

from tvqueue.schemas.search import VideoSearchResult

ISO_DURATION_PATTERN = re.compile(r"PT(?:(\d+)H)?(?:(\d+)M)?(?:(\d+)S)?")


def normalize_room_code(code: str) -> str:
    """Room codes are entered by hand; compare them upper-cased"""
    return code.strip().upper()


def parse_duration(duration: str | None) -> str:
    """
    Convert an ISO-8601 video duration into a clock string.

    Args:
        duration: Token such as "PT4M13S" or "PT1H2M3S"

    Returns:
        "H:MM:SS" when the video is an hour or longer, otherwise "M:SS".
        Tokens that do not match (including missing ones) become "0:00".
    """
    if not duration:
        return "0:00"

    match = ISO_DURATION_PATTERN.search(duration)
    if not match:
        return "0:00"

    hours = int(match.group(1) or 0)
    minutes = int(match.group(2) or 0)
    seconds = int(match.group(3) or 0)

    if hours > 0:
        return f"{hours}:{minutes:02d}:{seconds:02d}"
    return f"{minutes}:{seconds:02d}"


def pick_thumbnail(thumbnails: Dict[str, Any]) -> str:
    """Prefer the medium thumbnail, fall back to the default one"""
    for size in ("medium", "default"):
        url = (thumbnails.get(size) or {}).get("url")
        if url:
            return url
    return ""


def format_search_result(item: Dict[str, Any]) -> VideoSearchResult:
    """
    Format a YouTube `videos` resource for API responses.

    Args:
        item: One entry of the videos endpoint `items` list
              (requested with part=contentDetails,snippet)

    Returns:
        Search result with a formatted duration
    """
    snippet = item.get("snippet", {})
    return VideoSearchResult(
        video_id=item["id"],
        title=snippet.get("title", ""),
        thumbnail=pick_thumbnail(snippet.get("thumbnails", {})),
        channel_title=snippet.get("channelTitle", ""),
        duration=parse_duration(item.get("contentDetails", {}).get("duration")),
    )
