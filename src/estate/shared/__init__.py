"""
Shared Kernel Module
====================

Generic infrastructure used by every bounded context: logging, HTTP
middleware and route execution-mode declarations.

DO NOT add listing business logic to the shared kernel.
"""
