"""
HTTP interface of the market context.

Routers, request/response schemas and the dependency wiring that builds
use cases from infrastructure adapters.
"""
