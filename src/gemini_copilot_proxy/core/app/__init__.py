"""FastAPI application assembly for the gateway."""
