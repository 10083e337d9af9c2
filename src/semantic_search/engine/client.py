"""
Search Engine Client

Minimal blocking client for the OpenSearch REST API: executing a search
request body and creating an index from materialized settings and mapping.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, Optional

import httpx

from ..config import get_settings
from ..core.errors import SearchEngineError

logger = logging.getLogger("semantic.engine")


class SearchEngineClient:
    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        settings = get_settings()
        self.base_url = (base_url or settings.engine_url).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.http_timeout
        self._transport = transport

    def search(self, index: str, body: Dict[str, Any]) -> Dict[str, Any]:
        """
        Execute ``POST /{index}/_search``.

        Raises
        ------
        SearchEngineError
            On transport failures and non-2xx responses.
        """
        logger.debug("search %s: %s", index, body)
        return self._request("POST", f"/{index}/_search", json=body)

    def create_index(
        self,
        index: str,
        settings_json: str,
        mapping_json: str,
    ) -> Dict[str, Any]:
        """
        Execute ``PUT /{index}`` with the given settings and mapping documents.
        """
        body = {
            "settings": json.loads(settings_json),
            "mappings": json.loads(mapping_json),
        }
        return self._request("PUT", f"/{index}", json=body)

    def _request(self, method: str, path: str, **kwargs: Any) -> Dict[str, Any]:
        try:
            with httpx.Client(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self._transport,
            ) as client:
                resp = client.request(method, path, **kwargs)
            resp.raise_for_status()
        except httpx.HTTPError as exc:
            logger.error(
                "Search engine request failed (%s): %s %s, error=%s",
                type(exc).__name__,
                method,
                path,
                str(exc),
            )
            raise SearchEngineError(
                f"Search engine request failed: {type(exc).__name__}"
            ) from exc
        return resp.json()
