from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import httpx
from pydantic import BaseModel, ConfigDict, Field, ValidationError


DEFAULT_SEARCH_URL = "https://azuresearch-usnc.nuget.org/query"

logger = logging.getLogger(__name__)


class RegistryError(RuntimeError):
    """Base error for the package registry client."""


class SearchUnavailable(RegistryError):
    """Registry unreachable, returned an error status, or sent an unparsable body."""


class PackageRecord(BaseModel):
    """One search hit, normalized to a fixed shape.

    `project_url` and `icon_url` are empty strings when the registry omits them.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    version: str
    description: str
    project_url: str = ""
    icon_url: str = ""

    def as_list(self) -> List[str]:
        """Positional form used inside tap payloads."""
        return [self.name, self.version, self.description, self.project_url, self.icon_url]

    @classmethod
    def from_list(cls, items: List[str]) -> "PackageRecord":
        name, version, description, project_url, icon_url = items
        return cls(
            name=name,
            version=version,
            description=description,
            project_url=project_url,
            icon_url=icon_url,
        )


class _RegistryItem(BaseModel):
    # Shape of one element of the registry's "data" array
    id: str
    version: str
    description: str
    project_url: Optional[str] = Field(default=None, alias="projectUrl")
    icon_url: Optional[str] = Field(default=None, alias="iconUrl")


class PackageSearchClient:
    """
    Minimal async NuGet search client.

    Notes
    - One GET per `search()` call; no retries, caching or pagination.
    - The query text is sent as a query parameter, so httpx URL-encodes it.
    - Any transport, status or payload problem surfaces as `SearchUnavailable`.
    """

    def __init__(
        self,
        *,
        base_url: str = DEFAULT_SEARCH_URL,
        timeout: float = 15.0,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self._base_url = base_url.rstrip("?")
        self._timeout = timeout
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=self._timeout)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "PackageSearchClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    # --------------- Public API ---------------
    async def search(self, query_text: str) -> List[PackageRecord]:
        """
        Search packages whose id matches `query_text`, prereleases included.

        Returns records in registry response order.
        Raises SearchUnavailable on any failure; never returns partial results.
        """
        params = {"q": f"id:{query_text}", "prerelease": "true"}
        logger.debug("Searching registry for %r", query_text)
        payload = await self._request(params)
        try:
            return self._parse_search_payload(payload)
        except ValidationError as ve:  # from pydantic model validation
            logger.error("Unexpected search payload for %r", query_text)
            raise SearchUnavailable(f"Failed to parse search payload: {ve}") from ve

    # --------------- Internal ---------------
    async def _request(self, params: Dict[str, str]) -> Dict[str, Any]:
        try:
            resp = await self._client.get(self._base_url, params=params)
        except (httpx.TimeoutException, httpx.TransportError) as exc:
            logger.error("Registry request failed: %s", exc)
            raise SearchUnavailable("Package registry unreachable") from exc

        if resp.status_code != 200:
            logger.error("Registry returned HTTP %s", resp.status_code)
            raise SearchUnavailable(
                f"HTTP {resp.status_code} from package registry: {resp.text[:200]}"
            )
        try:
            payload = resp.json()
        except ValueError as exc:  # JSON decode error
            logger.error("Registry returned a non-JSON body")
            raise SearchUnavailable("Failed to parse JSON from package registry") from exc
        if not isinstance(payload, dict):
            raise SearchUnavailable("Malformed response from package registry")
        return payload

    @staticmethod
    def _parse_search_payload(payload: Dict[str, Any]) -> List[PackageRecord]:
        data = payload.get("data")
        if not isinstance(data, list):
            raise SearchUnavailable("Search payload has no data array")

        records: List[PackageRecord] = []
        for raw in data:
            item = _RegistryItem.model_validate(raw)
            records.append(
                PackageRecord(
                    name=item.id,
                    version=item.version,
                    description=item.description,
                    project_url=item.project_url or "",
                    icon_url=item.icon_url or "",
                )
            )
        return records


__all__ = [
    "PackageSearchClient",
    "PackageRecord",
    "RegistryError",
    "SearchUnavailable",
]
