"""Unit tests for the database layer.

Repositories run against in-memory SQLite, so no database service is needed.
"""
