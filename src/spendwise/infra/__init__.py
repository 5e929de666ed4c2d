"""Database infrastructure: engine, sessions, schema and repositories."""
