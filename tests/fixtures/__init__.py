"""Test fixtures and fakes for the quota service test suite."""
