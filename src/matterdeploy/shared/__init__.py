"""Shared schemas and utilities."""
