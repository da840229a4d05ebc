"""HTTP boundary for the element finder."""

from .models import ElementPathResponse, ElementsResponse, ErrorResponse, PathResponse
from .router import create_finder_router, handle_search_unavailable, include_finder_routes

__all__ = [
    "create_finder_router",
    "include_finder_routes",
    "handle_search_unavailable",
    "ElementsResponse",
    "PathResponse",
    "ElementPathResponse",
    "ErrorResponse",
]
