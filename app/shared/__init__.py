"""
Cross-cutting pieces shared by the API and the worker.

- errors: domain error to HTTP response mapping
- security: response headers and rate limits
- logging: process-wide log format and secret redaction
"""
