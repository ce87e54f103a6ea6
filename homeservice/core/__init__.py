"""
Core utilities shared across the booking API.

This package hosts configuration, logging setup, password hashing, CSRF
helpers and the per-IP rate limiter. Routers and services depend on these
primitives instead of reading the environment or cookies ad hoc.
"""
