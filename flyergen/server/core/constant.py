"""Application-wide constants for the HTTP server."""

PROJECT_NAME = "FlyerGen"
VERSION = "1.0.0"
API_V1_STR = "/api/v1"

SESSION_COOKIE_NAME = "session"
