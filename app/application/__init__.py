"""
Application layer package.

Contains use cases that orchestrate domain logic.
Each use case is a single class with one public method that returns
a typed result instead of raising for business failures.
This layer depends on domain ports, never on infrastructure.
"""
