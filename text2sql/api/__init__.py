"""HTTP API for Text2SQL (FastAPI)."""
