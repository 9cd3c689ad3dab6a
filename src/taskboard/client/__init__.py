"""
Client side of the board.

Components:
- api_client.py: async httpx client for /api/tasks
- cache.py: in-memory mirror of the server collection
- mutations.py: optimistic snapshot -> apply -> commit|rollback protocol
- views.py: filter / sort / column / calendar projections
"""
