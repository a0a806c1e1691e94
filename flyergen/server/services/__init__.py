"""Business logic used by the API endpoints."""
