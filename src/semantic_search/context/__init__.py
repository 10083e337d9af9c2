from .store import RequestContext, RequestContextStore

__all__ = ["RequestContext", "RequestContextStore"]
