"""
Tests for route execution-mode declarations.
"""

from fastapi import APIRouter, Depends, FastAPI, HTTPException
from fastapi.testclient import TestClient

from estate.infrastructure.database import get_connection_factory, get_session
from estate.shared.api import (
    DynamicAwareRoute,
    ExecutionMode,
    describe_routes,
    find_undeclared_routes,
    force_dynamic,
    get_execution_mode,
)


def build_sample_app() -> FastAPI:
    router = APIRouter(route_class=DynamicAwareRoute)

    @router.get("/static")
    async def static_page():
        return {"kind": "static"}

    @router.get("/dynamic")
    @force_dynamic
    async def dynamic_page():
        return {"kind": "dynamic"}

    @router.get("/dynamic-missing")
    @force_dynamic
    async def dynamic_missing():
        raise HTTPException(status_code=404, detail="gone")

    @router.get("/dynamic-count")
    @force_dynamic
    async def dynamic_count(n: int):
        return {"n": n}

    app = FastAPI()
    app.include_router(router)
    return app


class TestDeclaration:

    def test_default_mode_is_auto(self):
        async def handler():
            return None

        assert get_execution_mode(handler) is ExecutionMode.AUTO

    def test_force_dynamic_marks_and_returns_same_function(self):
        async def handler():
            return None

        decorated = force_dynamic(handler)

        assert decorated is handler
        assert get_execution_mode(handler) is ExecutionMode.FORCE_DYNAMIC


class TestDynamicAwareRoute:

    def test_dynamic_response_is_not_cacheable(self):
        client = TestClient(build_sample_app())

        response = client.get("/dynamic")

        assert response.status_code == 200
        assert response.headers["cache-control"] == "no-store, max-age=0"
        assert response.headers["x-execution-mode"] == "force-dynamic"

    def test_static_response_untouched(self):
        client = TestClient(build_sample_app())

        response = client.get("/static")

        assert response.status_code == 200
        assert "x-execution-mode" not in response.headers

    def test_http_errors_from_dynamic_route_are_not_cacheable(self):
        client = TestClient(build_sample_app())

        response = client.get("/dynamic-missing")

        assert response.status_code == 404
        assert response.headers["cache-control"] == "no-store, max-age=0"

    def test_request_validation_errors_are_not_cacheable(self):
        client = TestClient(build_sample_app())

        response = client.get("/dynamic-count", params={"n": "abc"})

        assert response.status_code == 422
        assert response.json()["detail"][0]["loc"] == ["query", "n"]
        assert response.headers["cache-control"] == "no-store, max-age=0"
        assert response.headers["x-execution-mode"] == "force-dynamic"


class TestRouteAudit:

    def test_undeclared_datastore_route_is_reported(self):
        app = FastAPI()

        async def service(session=Depends(get_session)):
            return session

        @app.get("/direct")
        async def direct(session=Depends(get_session)):
            return {}

        @app.get("/transitive")
        async def transitive(svc=Depends(service)):
            return {}

        @app.get("/declared")
        @force_dynamic
        async def declared(svc=Depends(service)):
            return {}

        @app.get("/plain")
        async def plain():
            return {}

        undeclared = {route.path for route in find_undeclared_routes(app)}

        assert undeclared == {"/direct", "/transitive"}

    def test_application_routes_all_declared(self):
        from estate.main import app

        assert find_undeclared_routes(app) == []

    def test_application_datastore_routes_detected(self):
        from estate.main import app

        routes = {(route.path, tuple(route.methods)): route for route in describe_routes(app)}

        assert routes[("/listings/{listing_id}", ("GET",))].uses_datastore
        assert routes[("/listings/{listing_id}/metadata", ("GET",))].mode is ExecutionMode.FORCE_DYNAMIC
        assert routes[("/", ("GET",))].uses_datastore is False

    def test_enumerating_routes_does_not_connect(self):
        from estate.main import app

        describe_routes(app)

        assert get_connection_factory().handle is None
