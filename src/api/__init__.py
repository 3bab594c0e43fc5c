"""
API layer - FastAPI routes and HTTP concerns for the governance pipeline.

This layer contains:
- FastAPI route definitions
- Request/Response DTOs
- HTTP middleware and problem details

IMPORT RULES:
- CAN import from: application, domain, bootstrap
- CANNOT import from: infrastructure adapters directly
"""

__all__: list[str] = []
