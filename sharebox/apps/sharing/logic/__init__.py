"""Business logic layer for sharing app.

- share_operations: share record lifecycle (create, find, delete, prune)
- authorization: per share type access decisions
- access_operations: listing and downloading shared files
"""
