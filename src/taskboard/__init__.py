"""
Task board.

Packages:
- tasks: Task model, JSON store and the task operations behind the HTTP API
- server: Flask app exposing /api/tasks
- client: async API client, task cache, optimistic mutation protocol, view projections
- cli / connectors: console client and entrypoint
"""

__version__ = "0.1.0"
