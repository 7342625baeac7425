"""
SerpAPI Search Client

Async HTTP client for Google results via SerpAPI:
- Organic results, "people also ask" questions
- Shared retry policy (429/5xx/network errors)
- Request/response logging
"""

import logging
from typing import Any, Dict, List, Optional

import httpx

from ..llm.retry import RetryPolicy

logger = logging.getLogger(__name__)


class SearchAPIError(Exception):
    """Custom exception for search API errors."""

    def __init__(self, message: str, status_code: int = None, response: dict = None, network: bool = False):
        super().__init__(message)
        self.status_code = status_code
        self.response = response
        self.network = network


_NO_RESULTS_MARKER = "hasn't returned any results"


class SerpApiClient:
    """
    Async client for SerpAPI.

    Usage:
        client = SerpApiClient(api_key="your_api_key")

        results = await client.search("roofers Leeds", location="Leeds, UK")
        # results["organic_results"] = [{"position": 1, "link": "...", "title": "..."}, ...]

        await client.close()
    """

    BASE_URL = "https://serpapi.com"

    def __init__(
        self,
        api_key: str,
        retry_policy: Optional[RetryPolicy] = None,
        country: str = "uk",
        language: str = "en",
        timeout: float = 60.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize SerpAPI client.

        Args:
            api_key: SerpAPI key
            retry_policy: Retry policy (optional)
            country: Google country code (gl)
            language: Google interface language (hl)
            timeout: Request timeout in seconds
            transport: Custom httpx transport (tests)
        """
        self.api_key = api_key
        self.retry_policy = retry_policy or RetryPolicy()
        self.country = country
        self.language = language

        self._client = httpx.AsyncClient(
            base_url=self.BASE_URL,
            timeout=httpx.Timeout(timeout),
            transport=transport,
        )
        self._closed = False

    async def search(
        self,
        query: str,
        location: Optional[str] = None,
        num: int = 10,
    ) -> Dict[str, Any]:
        """
        Run a Google search.

        Args:
            query: Search query
            location: SerpAPI location string (e.g., "Leeds, England, United Kingdom")
            num: Number of organic results

        Returns:
            SerpAPI response with organic_results and related_questions

        Raises:
            SearchAPIError: On API error after retries
        """
        if self._closed:
            raise SearchAPIError("Client is closed")

        params = {
            "engine": "google",
            "q": query,
            "num": num,
            "gl": self.country,
            "hl": self.language,
            "api_key": self.api_key,
        }
        if location:
            params["location"] = location

        return await self.retry_policy.run(
            lambda: self._make_request(params),
            label=f"Search '{query}'",
        )

    async def _make_request(self, params: Dict[str, Any]) -> Dict[str, Any]:
        """Make a single HTTP request."""
        logger.debug(f"GET /search.json q={params.get('q')!r}")

        try:
            response = await self._client.get("/search.json", params=params)
        except httpx.TimeoutException as e:
            raise SearchAPIError(f"Request timed out: {e}", network=True) from e
        except httpx.TransportError as e:
            raise SearchAPIError(f"HTTP error: {e}", network=True) from e
        except httpx.HTTPError as e:
            raise SearchAPIError(f"HTTP error: {e}") from e

        if response.status_code != 200:
            raise SearchAPIError(
                f"Search request failed: {response.status_code}",
                status_code=response.status_code,
                response=_safe_json(response),
            )

        try:
            result = response.json()
        except ValueError as e:
            raise SearchAPIError(f"Invalid JSON response: {e}") from e
        if not isinstance(result, dict):
            raise SearchAPIError("Invalid JSON response: expected an object")

        error = result.get("error")
        if error:
            if _NO_RESULTS_MARKER in error:
                logger.info(f"No results for '{params.get('q')}'")
                result.setdefault("organic_results", [])
                return result
            raise SearchAPIError(f"API error: {error}", status_code=400, response=result)

        return result

    async def close(self):
        """Close the HTTP client."""
        if not self._closed:
            await self._client.aclose()
            self._closed = True

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()


def _safe_json(response: httpx.Response) -> Optional[Dict]:
    try:
        return response.json() if response.content else None
    except ValueError:
        return None


def organic_results(response: Dict[str, Any]) -> List[Dict[str, Any]]:
    """Organic results list, tolerant of missing keys."""
    results = response.get("organic_results") if response else None
    return results if isinstance(results, list) else []
