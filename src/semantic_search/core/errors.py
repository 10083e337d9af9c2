"""
Error Handling

This module defines the semantic search exception taxonomy and the
application-wide exception handler.

Most failures in this package are recovered locally: malformed settings
become absent values, an unreachable model service means "model not ready",
and neural rewriting silently falls back to lexical search. The exceptions
below cover the remaining cases that must reach the caller.
"""

from __future__ import annotations

import logging
from typing import Dict, Any

from fastapi import Request
from fastapi.responses import JSONResponse

logger = logging.getLogger("semantic.errors")


# ---------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------

class SemanticSearchError(RuntimeError):
    """Base exception for semantic search failures."""


class UnsupportedQueryError(SemanticSearchError):
    """
    Raised when a query descriptor is asked to execute locally.

    Neural queries are evaluated by the search engine; reaching this error
    means a caller tried to score one in-process.
    """


class SearchEngineError(SemanticSearchError):
    """Raised when the search engine request fails at the transport or HTTP level."""


# ---------------------------------------------------------------------
# Public Exception Handlers
# ---------------------------------------------------------------------

async def unhandled_exception_handler(
    request: Request,
    exc: Exception,
) -> JSONResponse:
    """
    Catch-all handler for uncaught exceptions.

    Logs the full stack trace and returns a generic 500 payload so that end
    users never see internal error details.

    Parameters
    ----------
    request : Request
        The incoming HTTP request that triggered the exception.

    exc : Exception
        The uncaught exception instance.

    Returns
    -------
    JSONResponse
        A JSON 500 response with a minimal error payload.
    """
    logger.exception(
        "Unhandled exception during request: %s %s",
        request.method,
        request.url.path,
        exc_info=exc,
    )

    payload: Dict[str, Any] = {
        "error": "internal_server_error",
        "detail": "Internal server error",
    }

    return JSONResponse(
        status_code=500,
        content=payload,
    )
