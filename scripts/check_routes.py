#!/usr/bin/env python3
"""
Build-Phase Route Audit
=======================

Imports the application the way the hosting platform does during its
build: with no DATABASE_URL in the environment. Then:

1. Lists every API route with its declared execution mode
2. Fails if a route that reaches the datastore is not force-dynamic
3. Fails if importing the app opened a connection

Usage:
    python scripts/check_routes.py
"""

import os
import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

BUILD_PHASE_UNSET = ("DATABASE_URL",)


def main() -> int:
    """Run the audit. Returns the process exit code."""
    for name in BUILD_PHASE_UNSET:
        os.environ.pop(name, None)

    from estate.infrastructure.database import get_connection_factory
    from estate.main import app
    from estate.shared.api import describe_routes, find_undeclared_routes

    routes = describe_routes(app)
    print(f"Found {len(routes)} API routes\n")
    for route in routes:
        marker = "db" if route.uses_datastore else "  "
        print(f"  {','.join(route.methods):<12} {route.path:<40} {marker} {route.mode.value}")

    failures = []

    undeclared = find_undeclared_routes(app)
    for route in undeclared:
        failures.append(f"{route.endpoint} ({route.path}) uses the datastore but is not force-dynamic")

    if get_connection_factory().handle is not None:
        failures.append("importing the app opened a database connection")

    if failures:
        print("\nRoute audit FAILED:")
        for failure in failures:
            print(f"  - {failure}")
        return 1

    print("\nRoute audit passed")
    return 0


if __name__ == "__main__":
    sys.exit(main())
