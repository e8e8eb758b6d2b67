"""HTTP API for Router Pro."""
