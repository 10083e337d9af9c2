"""
Request Context Store

Holds the per-request search context while a query is compiled. The lexical
query pipeline calls into the neural rewrite through fixed signatures, so the
original query text and the caller's search parameters are published here
for the duration of one search and looked up by the executing thread.

Design choices
--------------
- One context per thread, keyed by ``threading.get_ident()``.
- The map is guarded by a re-entrant lock; contexts themselves are immutable.
- Misuse (double create, close without create) is logged, never raised.
- ``scoped()`` pairs create with a guaranteed close so that pooled worker
  threads never carry a context into an unrelated request.
"""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from dataclasses import dataclass
from threading import RLock
from typing import Any, Dict, Iterator, Optional

from ..auth.models import CallerIdentity

logger = logging.getLogger("semantic.context")


@dataclass(frozen=True, eq=False)
class RequestContext:
    """
    Original query, search parameters and optional caller of one search call.
    """

    query: str
    params: Any
    caller: Optional[CallerIdentity] = None

    def __repr__(self) -> str:
        caller = self.caller.username if self.caller else None
        return f"RequestContext(query={self.query!r}, params={self.params!r}, caller={caller!r})"


class RequestContextStore:
    """
    Thread-keyed store of active RequestContext objects.
    """

    def __init__(self) -> None:
        self._contexts: Dict[int, RequestContext] = {}
        self._lock = RLock()

    # ------------------------------------------------------------------
    # Core operations
    # ------------------------------------------------------------------

    def create_context(
        self,
        query: str,
        params: Any,
        caller: Optional[CallerIdentity] = None,
    ) -> RequestContext:
        """
        Install a new context for the current thread.

        An existing context on this thread is discarded with a warning.

        Returns
        -------
        RequestContext
            The newly installed context.
        """
        key = threading.get_ident()
        context = RequestContext(query=query, params=params, caller=caller)
        with self._lock:
            previous = self._contexts.pop(key, None)
            if previous is not None:
                logger.warning("The context exists: %r", previous)
            self._contexts[key] = context
        return context

    def get_context(self) -> Optional[RequestContext]:
        with self._lock:
            return self._contexts.get(threading.get_ident())

    def close_context(self) -> None:
        with self._lock:
            if self._contexts.pop(threading.get_ident(), None) is None:
                logger.warning("The context does not exist.")

    @contextmanager
    def scoped(
        self,
        query: str,
        params: Any,
        caller: Optional[CallerIdentity] = None,
    ) -> Iterator[RequestContext]:
        """
        Context manager that always closes the context it created.

        Example::

            with store.scoped(query, params) as ctx:
                compile_query(...)
        """
        context = self.create_context(query, params, caller)
        try:
            yield context
        finally:
            self.close_context()

    # ------------------------------------------------------------------
    # Utility operations
    # ------------------------------------------------------------------

    def clear_all(self) -> None:
        """
        Drop every context. Intended for test teardown.
        """
        with self._lock:
            self._contexts.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._contexts)
