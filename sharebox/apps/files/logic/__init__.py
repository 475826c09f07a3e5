"""Business logic layer for files app.

This package contains all business logic for personal storage:
- Directory listing, folder creation, upload and delete
- Single file and zip archive downloads

All business logic should be implemented here, separate from
views (HTTP layer) and infrastructure (host filesystem).
"""
