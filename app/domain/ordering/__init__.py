"""
Ordering bounded context, domain layer.

This module contains all domain logic for the ordering context:
- The Order aggregate and its items
- Order lifecycle (pending, confirmed, paid, shipped, cancelled)
- Domain events and the outbox record
- Ports for persistence, pricing, events and time
"""
