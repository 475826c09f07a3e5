"""Infrastructure layer for files app.

This package contains integrations with the host system:
- Sandbox path resolution and confinement checks
- File metadata (entries, extensions, share file identifiers)
- MIME type detection

Keep infrastructure concerns separate from business logic.
"""
