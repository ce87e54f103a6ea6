"""
High-level use cases for the booking API.

Each service module orchestrates the repository to implement business rules
(validate a booking, check ownership, register a user, etc.). Routers call
these services instead of touching the database or sessions directly.
"""
