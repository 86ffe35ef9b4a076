"""HTTP API for the split router."""
