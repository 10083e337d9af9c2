"""
Semantic search layer for an OpenSearch-backed full-text search service.
"""

__version__ = "0.1.0"
