"""API models shared by the server."""
