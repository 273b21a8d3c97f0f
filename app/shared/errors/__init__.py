"""
Shared error handling package.

Centralizes error-to-HTTP mapping so that use-case errors
are consistently translated into API responses.
"""
