"""
Persistence adapters.

Services depend on ``SQLRepository`` (or any object with the same methods)
rather than opening SQLAlchemy sessions themselves.
"""
