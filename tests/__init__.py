"""
Test suite for legoworld application.

This module contains unit tests for models, services, handlers,
the HTTP endpoints and the batch upload CLI.
"""
