"""External integrations (identity provider)."""
