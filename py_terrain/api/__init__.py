"""HTTP API for terrain generation."""
