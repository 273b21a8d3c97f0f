"""
Infrastructure adapters for the ordering bounded context.

Each adapter implements a domain port (ABC) and connects
to external systems: SQL databases, the pricing API, webhooks.
In-memory adapters back local development and tests.
"""
