"""SQLAlchemy adapters."""
