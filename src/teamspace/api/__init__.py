"""HTTP API for TeamSpace."""
