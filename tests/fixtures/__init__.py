"""Test fixtures and mocks."""
