"""HTTP server for stateflow: SQLite stores, services and FastAPI routes."""
