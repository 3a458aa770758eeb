"""HTTP API for the talent back-office (FastAPI)."""
