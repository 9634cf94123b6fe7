"""HTTP API for QueryBot."""
