"""FastAPI router exposing the element finder to a UI layer.

The router is a thin boundary over ``ElementFinder``: it decodes query
parameters, maps results to response models and turns
``SearchUnavailableError`` into HTTP 503 so clients can retry.
"""

import logging

from fastapi import APIRouter, FastAPI, Query, Request
from fastapi.responses import JSONResponse

from elementfinder.exceptions import SearchUnavailableError
from elementfinder.finder import ElementFinder

from .models import ElementPathResponse, ElementsResponse, ErrorResponse, PathResponse

logger = logging.getLogger(__name__)


def _not_found(query: str) -> str:
    return f"no elements found for {query}"


def create_finder_router(finder: ElementFinder, prefix: str = "/elements") -> APIRouter:
    """Build a router bound to ``finder``.

    Args:
        finder: Element finder for the currently loaded model
        prefix: URL prefix for all routes

    Returns:
        APIRouter with search, property, path and element-path routes
    """
    router = APIRouter(prefix=prefix, tags=["elements"])
    unavailable = {503: {"model": ErrorResponse}}

    @router.get("/search", response_model=ElementsResponse, responses=unavailable)
    async def search_elements(term: str = Query(..., min_length=1)) -> ElementsResponse:
        outcome = await finder.search(term)
        ids = outcome.matches.to_list()
        return ElementsResponse(
            query=outcome.term,
            ids=ids,
            count=len(ids),
            strategy=outcome.strategy,
            message=outcome.message,
        )

    @router.get("/by-property", response_model=ElementsResponse, responses=unavailable)
    async def elements_by_property(
        name: str = Query(..., min_length=1),
        value: str = Query(...),
        exhaustive: bool = False,
    ) -> ElementsResponse:
        ids = await finder.find_elements_by_property(name, value, exhaustive=exhaustive)
        query = f"{name}={value}"
        return ElementsResponse(
            query=query,
            ids=ids,
            count=len(ids),
            strategy="property_scan",
            message=f"found {len(ids)} element(s) for {query}" if ids else _not_found(query),
        )

    @router.get("/by-path", response_model=PathResponse, responses=unavailable)
    async def elements_by_path(path: str = Query(..., min_length=1)) -> PathResponse:
        resolution = await finder.resolve_path_detailed(path)
        ids = resolution.matches.to_list()
        if resolution.complete:
            message = f"found {len(ids)} element(s) for {resolution.path}"
        elif resolution.failed_segment is not None and ids:
            message = f"path resolved up to segment '{resolution.failed_segment}'"
        else:
            message = _not_found(resolution.path)
        return PathResponse(
            query=resolution.path,
            ids=ids,
            count=len(ids),
            strategy="path",
            message=message,
            segments=resolution.segments,
            resolved_depth=resolution.resolved_depth,
            complete=resolution.complete,
        )

    @router.get("/{node_id}/path", response_model=ElementPathResponse, responses=unavailable)
    async def element_path(node_id: int) -> ElementPathResponse:
        path = await finder.get_element_path(node_id)
        return ElementPathResponse(
            node_id=node_id,
            path=path,
            message="" if path is not None else "model not available",
        )

    return router


async def handle_search_unavailable(request: Request, exc: SearchUnavailableError) -> JSONResponse:
    """Map ``SearchUnavailableError`` to a 503 response."""
    logger.error(
        f"Search unavailable [{request.method} {request.url.path}]: {exc.message}",
        extra={"details": exc.details},
    )
    body = ErrorResponse(error_code="search_unavailable", message=exc.message, details=exc.details)
    return JSONResponse(status_code=503, content=body.model_dump())


def include_finder_routes(app: FastAPI, finder: ElementFinder, prefix: str = "/elements") -> None:
    """Mount the finder router and its error handler on ``app``."""
    app.include_router(create_finder_router(finder, prefix))
    app.add_exception_handler(SearchUnavailableError, handle_search_unavailable)
