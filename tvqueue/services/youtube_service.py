import httpx
from typing import List, Sequence
from tvqueue.core.exceptions import UpstreamError
from tvqueue.core.logging import get_logger
from tvqueue.schemas.search import VideoSearchResult
from tvqueue.utils.formatters import format_search_result

logger = get_logger("YouTubeService")


class ApiKeyRotator:
    """Hands out API keys round-robin to spread quota usage"""

    def __init__(self, keys: Sequence[str]):
        self.keys = [key for key in keys if key]
        self._index = 0

    def __len__(self) -> int:
        return len(self.keys)

    def next(self) -> tuple[int, str]:
        """
        Returns:
            (index, key) of the key to use for the next call

        Raises:
            UpstreamError: no key is configured
        """
        if not self.keys:
            raise UpstreamError("YouTube API key not configured")
        index = self._index
        self._index = (self._index + 1) % len(self.keys)
        return index, self.keys[index]


class YouTubeService:
    API_BASE_URL = "https://www.googleapis.com/youtube/v3"

    def __init__(
        self,
        api_keys: Sequence[str],
        keyword: str = "karaoke",
        max_results: int = 20,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.rotator = ApiKeyRotator(api_keys)
        self.keyword = keyword
        self.max_results = max_results
        self.timeout = timeout
        self._transport = transport

    def build_query(self, query: str) -> str:
        return f"{query.strip()} {self.keyword}".strip()

    async def search(self, query: str) -> List[VideoSearchResult]:
        """
        Search videos and enrich them with duration and thumbnails.

        Both requests of one search use the same key.

        Raises:
            UpstreamError: missing key, HTTP error or unreachable API
        """
        index, api_key = self.rotator.next()
        logger.debug(f"Using YouTube API key index {index} of {len(self.rotator)}")

        async with httpx.AsyncClient(
            base_url=self.API_BASE_URL,
            timeout=self.timeout,
            transport=self._transport,
        ) as client:
            search_data = await self._get(client, "/search", {
                "part": "snippet",
                "type": "video",
                "maxResults": self.max_results,
                "q": self.build_query(query),
                "key": api_key,
            })

            video_ids = [
                item["id"]["videoId"]
                for item in search_data.get("items", [])
                if item.get("id", {}).get("videoId")
            ]
            if not video_ids:
                return []

            details_data = await self._get(client, "/videos", {
                "part": "contentDetails,snippet",
                "id": ",".join(video_ids),
                "key": api_key,
            })

        results = [format_search_result(item) for item in details_data.get("items", [])]
        logger.info(f"Search '{query}' returned {len(results)} videos")
        return results

    async def _get(self, client: httpx.AsyncClient, path: str, params: dict) -> dict:
        try:
            response = await client.get(path, params=params)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as e:
            logger.error(f"YouTube API {path} failed: HTTP {e.response.status_code}")
            raise UpstreamError(f"YouTube API error: {e.response.status_code}") from e
        except httpx.HTTPError as e:
            logger.error(f"YouTube API {path} unreachable: {e}")
            raise UpstreamError("YouTube API unreachable") from e
