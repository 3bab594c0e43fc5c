"""
Application layer - Use cases and orchestration for the governance pipeline.

This layer contains:
- Application services (pipeline orchestration)
- Port definitions (abstract interfaces for infrastructure)

IMPORT RULES:
- CAN import from: domain
- CANNOT import from: infrastructure, api
"""
