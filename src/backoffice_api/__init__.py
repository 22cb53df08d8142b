"""FastAPI application for the back-office REST API."""
