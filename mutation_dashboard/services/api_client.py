from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Mapping, Optional

import httpx

from mutation_dashboard.core.exceptions import IngestionError, IngestionErrorKind

logger = logging.getLogger(__name__)

# Keys under which a wrapped payload may carry its rows
WRAPPER_KEYS = ("data", "results", "records")


def _normalize_url(url: str) -> str:
    if not url.startswith(("http://", "https://")):
        return f"http://{url.rstrip('/')}"
    return url


def extract_rows(payload: Any) -> List[Mapping[str, Any]]:
    """
    Pull the list of row objects out of a decoded JSON payload.

    Raises:
        IngestionError(PARSE): if the payload is not a list of objects
    """
    if isinstance(payload, dict):
        for key in WRAPPER_KEYS:
            if isinstance(payload.get(key), list):
                payload = payload[key]
                break

    if not isinstance(payload, list):
        raise IngestionError(
            IngestionErrorKind.PARSE,
            f"Expected a JSON array of records, got {type(payload).__name__}",
        )
    if not all(isinstance(item, dict) for item in payload):
        raise IngestionError(IngestionErrorKind.PARSE, "JSON array must contain only objects")
    return payload


class MutationApiClient:
    """
    Async client for the remote mutation endpoint.

    A fresh httpx.AsyncClient is opened per fetch, so the client can be driven
    from independent event loops (one asyncio.run per Dash callback).
    """

    def __init__(
        self,
        url: str,
        *,
        timeout: float = 10.0,
        headers: Optional[Mapping[str, str]] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._url = _normalize_url(url)
        self._timeout = timeout
        self._headers: Dict[str, str] = dict(headers or {})
        self._transport = transport

    @property
    def url(self) -> str:
        return self._url

    async def fetch_rows(self) -> List[Mapping[str, Any]]:
        """
        GET the endpoint and return the raw row objects.

        Raises:
            IngestionError(NETWORK): transport failure or non-2xx status
            IngestionError(PARSE): body is not JSON / not a list of objects
        """
        try:
            async with httpx.AsyncClient(
                timeout=httpx.Timeout(self._timeout),
                headers=self._headers,
                transport=self._transport,
            ) as client:
                response = await client.get(self._url)
                response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise IngestionError(
                IngestionErrorKind.NETWORK,
                f"API responded with status {e.response.status_code}",
            ) from e
        except httpx.HTTPError as e:
            raise IngestionError(IngestionErrorKind.NETWORK, f"API request failed: {e}") from e

        try:
            payload = response.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise IngestionError(IngestionErrorKind.PARSE, "API response is not valid JSON") from e

        rows = extract_rows(payload)
        logger.info("Fetched API rows", extra={"url": self._url, "n_rows": len(rows)})
        return rows
