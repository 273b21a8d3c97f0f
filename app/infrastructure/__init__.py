"""
Infrastructure layer package.

Contains concrete implementations (adapters) of the ports
defined in the domain layer. This is where databases, HTTP
APIs, the event outbox and other external integrations live.
"""
