"""Core infrastructure: settings, database, security, observability."""
