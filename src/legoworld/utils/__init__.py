"""Helper utilities for legoworld."""
