"""
Use cases for the ordering bounded context.

Each use case:
- Receives a command/query DTO
- Calls domain ports to fetch/persist data
- Applies aggregate operations
- Returns a Result wrapping an output DTO or an AppError
"""
