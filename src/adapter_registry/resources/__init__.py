"""Packaged resources for the adapter registry."""
