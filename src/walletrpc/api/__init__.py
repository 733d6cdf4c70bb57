"""HTTP facade (FastAPI) for the JSON-RPC dispatcher."""
