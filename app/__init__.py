"""
Order Service: e-commerce order management API.

Application package root. This is a modular monolith using
hexagonal architecture (ports & adapters) with domain-driven design.

Bounded contexts:
    - ordering: Order lifecycle, item pricing, domain events via an outbox.

Layers:
    - domain: Pure business logic, entities, ports (ABCs), errors.
    - application: Use cases, DTOs, result model, orchestration.
    - infrastructure: Adapters (DB, HTTP pricing, outbox) implementing domain ports.
    - interfaces: FastAPI routers, Pydantic schemas.
    - shared: Cross-cutting concerns (errors, security, logging).
    - core: Configuration and the composition root.
"""
