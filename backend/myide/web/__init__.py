"""HTTP API for myide."""
