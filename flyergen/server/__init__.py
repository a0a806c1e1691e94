"""FlyerGen HTTP server."""
