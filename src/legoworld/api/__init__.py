"""HTTP endpoints for legoworld."""
