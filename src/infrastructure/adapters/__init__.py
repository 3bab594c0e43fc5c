"""Infrastructure adapters: HTTP evaluators and PostgreSQL repositories."""
