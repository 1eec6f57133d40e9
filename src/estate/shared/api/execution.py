"""
Route Execution Modes
=====================

Per-handler declaration that a route must be evaluated on every request.

The hosting platform may pre-render or cache responses from handlers it
believes are static. Handlers that read the datastore or request-specific
data are marked with ``@force_dynamic``; ``DynamicAwareRoute`` turns that
marker into ``Cache-Control: no-store`` on every response, and
``find_undeclared_routes()`` lets the build step fail when a data-backed
handler forgot the marker.

Usage:
    router = APIRouter(prefix="/listings", route_class=DynamicAwareRoute)

    @router.get("/{listing_id}")
    @force_dynamic
    async def get_listing(listing_id: str, session: AsyncSession = Depends(get_session)):
        ...
"""

from enum import Enum
from typing import Any, Callable, Iterable, List, NamedTuple, Optional, TypeVar

from fastapi import FastAPI, Request, Response
from fastapi.exception_handlers import request_validation_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.dependencies.models import Dependant
from fastapi.routing import APIRoute
from starlette.exceptions import HTTPException as StarletteHTTPException

from estate.infrastructure.database import get_session


EXECUTION_MODE_ATTR = "__execution_mode__"

DYNAMIC_RESPONSE_HEADERS = {
    "Cache-Control": "no-store, max-age=0",
    "X-Execution-Mode": "force-dynamic",
}

F = TypeVar("F", bound=Callable[..., Any])


class ExecutionMode(str, Enum):
    """How the hosting platform may treat a handler's output."""
    AUTO = "auto"
    FORCE_DYNAMIC = "force-dynamic"


def force_dynamic(endpoint: F) -> F:
    """Mark a handler as always evaluated per request, never cached."""
    setattr(endpoint, EXECUTION_MODE_ATTR, ExecutionMode.FORCE_DYNAMIC)
    return endpoint


def get_execution_mode(endpoint: Callable[..., Any]) -> ExecutionMode:
    return getattr(endpoint, EXECUTION_MODE_ATTR, ExecutionMode.AUTO)


def is_force_dynamic(endpoint: Callable[..., Any]) -> bool:
    return get_execution_mode(endpoint) is ExecutionMode.FORCE_DYNAMIC


class DynamicAwareRoute(APIRoute):
    """
    APIRoute that stamps no-store headers on dynamic handlers' responses.

    HTTP errors raised by the handler get the same headers, so a 404 for a
    listing that exists a second later is not cached either. Request
    validation failures are answered here with the default 422 body.
    """

    def get_route_handler(self) -> Callable:
        original_handler = super().get_route_handler()

        if not is_force_dynamic(self.endpoint):
            return original_handler

        async def dynamic_route_handler(request: Request) -> Response:
            try:
                response = await original_handler(request)
            except StarletteHTTPException as exc:
                headers = dict(exc.headers or {})
                headers.update(DYNAMIC_RESPONSE_HEADERS)
                exc.headers = headers
                raise
            except RequestValidationError as exc:
                response = await request_validation_exception_handler(request, exc)
            response.headers.update(DYNAMIC_RESPONSE_HEADERS)
            return response

        return dynamic_route_handler


class RouteDescription(NamedTuple):
    methods: List[str]
    path: str
    endpoint: str
    mode: ExecutionMode
    uses_datastore: bool


def _depends_on(dependant: Dependant, targets: Iterable[Callable[..., Any]]) -> bool:
    targets = tuple(targets)
    for sub in dependant.dependencies:
        if sub.call in targets:
            return True
        if _depends_on(sub, targets):
            return True
    return False


def describe_routes(
    app: FastAPI,
    data_dependencies: Optional[Iterable[Callable[..., Any]]] = None,
) -> List[RouteDescription]:
    """
    Enumerate API routes with their declared execution mode.

    Pure inspection: reads no configuration and opens no connections.
    """
    targets = tuple(data_dependencies) if data_dependencies else (get_session,)

    descriptions = []
    for route in app.routes:
        if not isinstance(route, APIRoute):
            continue
        descriptions.append(RouteDescription(
            methods=sorted(route.methods or []),
            path=route.path,
            endpoint=f"{route.endpoint.__module__}.{route.endpoint.__name__}",
            mode=get_execution_mode(route.endpoint),
            uses_datastore=_depends_on(route.dependant, targets),
        ))
    return descriptions


def find_undeclared_routes(
    app: FastAPI,
    data_dependencies: Optional[Iterable[Callable[..., Any]]] = None,
) -> List[RouteDescription]:
    """Routes that reach the datastore without declaring FORCE_DYNAMIC."""
    return [
        route for route in describe_routes(app, data_dependencies)
        if route.uses_datastore and route.mode is not ExecutionMode.FORCE_DYNAMIC
    ]
