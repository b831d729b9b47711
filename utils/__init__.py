"""Shared helpers for request handling, auth and security."""
