"""Handler layer for HTTP endpoints.

This layer contains the HTTP request/response handlers.
Handlers depend on services (business logic), not directly on repositories.

Architecture:
    Handler -> Service -> Repository
    (HTTP)  -> (Business) -> (Data Access)
"""

from .thesaurus_handler import ThesaurusHandler, to_http_error

__all__ = [
    "ThesaurusHandler",
    "to_http_error",
]
