"""
Interfaces layer package.

Contains the FastAPI routers, the Pydantic request/response schemas
and the dependency functions that hand out use cases from the
application container. Routes translate requests to commands and
use-case results to responses; no business logic belongs here.
"""
