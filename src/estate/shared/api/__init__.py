"""
Shared API Layer
================

HTTP concerns shared by every router: middleware, exception handlers and
route execution-mode declarations.
"""

from estate.shared.api.execution import (
    DYNAMIC_RESPONSE_HEADERS,
    DynamicAwareRoute,
    ExecutionMode,
    describe_routes,
    find_undeclared_routes,
    force_dynamic,
    get_execution_mode,
    is_force_dynamic,
)

__all__ = [
    "DYNAMIC_RESPONSE_HEADERS",
    "DynamicAwareRoute",
    "ExecutionMode",
    "describe_routes",
    "find_undeclared_routes",
    "force_dynamic",
    "get_execution_mode",
    "is_force_dynamic",
]
