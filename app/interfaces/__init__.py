"""
Interfaces layer package.

HTTP surface of the service: the health checks and the market routers.
Request validation happens here; decisions happen in the use cases.
"""
