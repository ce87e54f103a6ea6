"""
FastAPI routers grouped by area (bookings, services, auth, pages).

Each module exposes an APIRouter included by the application in app.py and
delegates to the services package for business rules.
"""
