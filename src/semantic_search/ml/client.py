"""
ML Model Service Client

Thin client for the model-serving endpoints of the search engine's ML plugin:

- ``GET  {ml}/models/{id}``        model status (``model_state``)
- ``POST {ml}/models/{id}/_load``  deploy request (``task_id``)
- ``GET  {ml}/tasks/{id}``         task status (``state``)

Every call is a single blocking request. Failures never raise: a non-200
response or a transport error yields an empty dict, which callers treat as
"unknown". These calls run only at startup and on configuration reload.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

from ..config import get_settings

logger = logging.getLogger("semantic.ml")


class ModelServiceClient:
    """
    Blocking HTTP client for model status, model loading and task status.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        """
        Parameters
        ----------
        base_url : Optional[str]
            ML plugin root, e.g. ``http://localhost:9200/_plugins/_ml``.
            Defaults to ``engine_url + ml_path`` from settings.

        timeout : Optional[float]
            Per-request timeout in seconds. Defaults to settings.http_timeout.

        transport : Optional[httpx.BaseTransport]
            Custom transport, mainly for tests.
        """
        settings = get_settings()
        if base_url is None:
            base_url = settings.engine_url.rstrip("/") + settings.ml_path
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout if timeout is not None else settings.http_timeout
        self._transport = transport

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def get_model(self, model_id: str) -> Dict[str, Any]:
        return self._request("GET", f"/models/{model_id}", f"model:{model_id}")

    def load_model(self, model_id: str) -> Dict[str, Any]:
        return self._request("POST", f"/models/{model_id}/_load", f"load:{model_id}")

    def get_task(self, task_id: str) -> Dict[str, Any]:
        return self._request("GET", f"/tasks/{task_id}", f"task:{task_id}")

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _request(self, method: str, path: str, label: str) -> Dict[str, Any]:
        try:
            with httpx.Client(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self._transport,
            ) as client:
                resp = client.request(method, path)
        except httpx.HTTPError as exc:
            logger.warning(
                "Request failed for %s (%s): %s",
                label,
                type(exc).__name__,
                str(exc),
            )
            return {}

        if resp.status_code != 200:
            logger.debug("Unexpected status for %s: %s %s", label, resp.status_code, resp.text)
            return {}

        try:
            data = resp.json()
        except ValueError:
            logger.warning("Invalid JSON response for %s", label)
            return {}

        if not isinstance(data, dict):
            logger.warning("Unexpected response for %s: %r", label, data)
            return {}
        return data
