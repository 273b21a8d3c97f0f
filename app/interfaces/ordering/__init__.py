"""HTTP routes, schemas and dependencies for the ordering bounded context."""
