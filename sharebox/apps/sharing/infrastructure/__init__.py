"""Infrastructure layer for sharing app (password hashing)."""
