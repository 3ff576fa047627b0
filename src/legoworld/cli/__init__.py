"""Command line tools for legoworld."""
