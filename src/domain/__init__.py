"""
Domain layer - Pure business logic for the governance pipeline.

This layer contains:
- Domain models (submissions, refinement records, voting sessions, ...)
- Domain errors
- Stage and status transition rules

CRITICAL: This layer must NOT import from application, infrastructure, or api.
Only stdlib, typing and uuid6 imports are allowed.
"""
