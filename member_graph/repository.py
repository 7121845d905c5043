"""Association API client (members, relations, patrons)."""

import httpx
import logging
from typing import List, Optional, Dict, Any, Callable, TypeVar

from .config import RepositoryConfig
from .graph.schema import Member, MemberRelation, Patron

logger = logging.getLogger(__name__)

T = TypeVar("T")


class AssociationAPI:
    """
    Read-only client for the association admin API.

    Every list endpoint answers ``{"success": bool, "data": [...]}``; only
    the ``data`` array is used.
    """

    def __init__(
        self,
        config: RepositoryConfig,
        transport: Optional[httpx.BaseTransport] = None
    ):
        """
        Initialize the API client.

        Args:
            config: Repository configuration (base URL, token, timeout)
            transport: Optional httpx transport (tests use httpx.MockTransport)
        """
        self.config = config
        self.base_url = config.base_url.rstrip("/")
        self._client = httpx.Client(timeout=config.timeout_seconds, transport=transport)

    def _get_headers(self) -> dict:
        """Get headers for API requests."""
        headers = {"accept": "application/json"}
        if self.config.token:
            headers["authorization"] = f"Bearer {self.config.token}"
        return headers

    def _get_list(
        self,
        path: str,
        parse: Callable[[Dict[str, Any]], T],
        params: Optional[dict] = None
    ) -> List[T]:
        """
        Fetch a ``{success, data}`` list endpoint and parse its items.

        Raises:
            httpx.HTTPStatusError: On a non-2xx response
            RuntimeError: If the API answers success=false, or an item
                cannot be parsed
        """
        url = f"{self.base_url}{path}"
        response = self._client.get(url, headers=self._get_headers(), params=params)
        response.raise_for_status()

        payload = response.json()
        if not payload.get("success", False):
            error = payload.get("error") or payload.get("message") or "unknown error"
            raise RuntimeError(f"Association API request {path} failed: {error}")

        items = []
        for index, item in enumerate(payload.get("data") or []):
            try:
                items.append(parse(item))
            except (KeyError, ValueError, TypeError) as e:
                logger.error(f"Invalid item #{index} from {path}: {e!r}")
                raise RuntimeError(f"Association API request {path} returned an invalid item #{index}: {e!r}") from e

        logger.debug(f"Fetched {len(items)} item(s) from {path}")
        return items

    def get_members(self) -> List[Member]:
        """Get the member roster."""
        return self._get_list("/api/admin/members", Member.from_api)

    def get_relations(self) -> List[MemberRelation]:
        """Get all member relations."""
        return self._get_list("/api/admin/relations", MemberRelation.from_api)

    def get_patrons(self) -> List[Patron]:
        """Get patrons (first page, sized by PATRONS_LIMIT)."""
        return self._get_list(
            "/api/admin/patrons",
            Patron.from_api,
            params={"limit": self.config.patrons_limit}
        )

    def close(self):
        """Close the HTTP client."""
        self._client.close()
