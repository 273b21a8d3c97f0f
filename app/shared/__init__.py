"""
Shared module package.

Cross-cutting concerns used by every layer of the order service:
error-kind to HTTP mapping, HTTP middleware (security headers,
request ids, rate limiting) and logging configuration.
"""
