"""
Infrastructure layer - External adapters for the governance pipeline.

This layer contains:
- PostgreSQL repositories (adapters.persistence)
- Language model and embedding evaluators (adapters.evaluators)
- In-memory stubs for development and tests (stubs)
- Logging and correlation ids (observability)

IMPORT RULES:
- CAN import from: domain, application
- Implements ports defined in application layer
"""
