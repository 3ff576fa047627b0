"""User interface layer for legoworld."""
