"""Response models for the element finder endpoints."""

from typing import List, Optional

from pydantic import BaseModel, Field


class ElementsResponse(BaseModel):
    """Identifiers found for a query plus a user-visible message."""

    query: str
    ids: List[int] = Field(default_factory=list)
    count: int = 0
    strategy: Optional[str] = None
    message: str = ""


class PathResponse(ElementsResponse):
    """Identifiers found for a path and how far resolution got."""

    segments: List[str] = Field(default_factory=list)
    resolved_depth: int = 0
    complete: bool = False


class ElementPathResponse(BaseModel):
    """Rendered ancestor chain of one element."""

    node_id: int
    path: Optional[str] = None
    message: str = ""


class ErrorResponse(BaseModel):
    error_code: str
    message: str
    details: Optional[dict] = None
